from .routes import public_bp

__all__ = ['public_bp']
