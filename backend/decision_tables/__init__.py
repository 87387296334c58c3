from .git_routes import git_bp
from .routes import tables_bp

__all__ = ['tables_bp', 'git_bp']
