"""
Modules package initialization.
Each feature module keeps its own api, models, schemas and services.
"""

from instalike.modules import auth
from instalike.modules import user_management
from instalike.modules import posts
from instalike.modules import follows
