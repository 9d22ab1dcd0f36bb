"""WSGI middleware: authentication, authorization, ETag, health check and security headers."""