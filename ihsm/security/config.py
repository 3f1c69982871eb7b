"""Security configuration and middleware."""

from flask import abort, request

JSON_PAYLOAD_LIMIT = 1024 * 1024  # 1MB
MULTIPART_OVERHEAD = 64 * 1024


def configure_security_headers(app):
    """Configure security headers."""

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses."""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'

        # Player photos are served by the image host, never by us
        csp_directives = [
            "default-src 'self'",
            "img-src 'self' data: https://i.ibb.co https:",
            "connect-src 'self'",
            "frame-ancestors 'none'",
            "base-uri 'self'",
            "form-action 'self'",
        ]
        response.headers['Content-Security-Policy'] = "; ".join(csp_directives)

        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        # Authenticated JSON must not be cached by intermediaries
        if response.mimetype == 'application/json':
            response.headers.setdefault('Cache-Control', 'no-store')

        return response

    return app


def configure_secure_session(app):
    """Configure secure session settings."""
    app.config.setdefault('SESSION_COOKIE_HTTPONLY', True)
    app.config.setdefault('SESSION_COOKIE_SAMESITE', 'Lax')
    # Hostel unlocks live in the session, so it outlives a single page view
    app.config.setdefault('PERMANENT_SESSION_LIFETIME', 12 * 3600)
    return app


def validate_input_length(app):
    """Reject oversized request bodies before they reach a view."""

    @app.before_request
    def limit_request_size():
        if not request.content_length:
            return None
        limit = JSON_PAYLOAD_LIMIT
        if request.mimetype == 'multipart/form-data':
            limit = max(limit, app.config.get('MAX_IMAGE_SIZE', 0) + MULTIPART_OVERHEAD)
        if request.content_length > limit:
            abort(413)
        return None

    return app


__all__ = ['configure_security_headers', 'configure_secure_session', 'validate_input_length']
