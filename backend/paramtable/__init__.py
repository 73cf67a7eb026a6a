from .routes import tables_bp

__all__ = ['tables_bp']
