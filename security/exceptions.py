"""security/exceptions.py -- Errors raised while assembling a security policy."""


class SecurityConfigurationError(ValueError):
    """The security policy is malformed.

    Raised by matchers and builders while the application is starting up.
    Nothing catches it: a broken policy must stop the process rather than
    serve requests under a policy nobody declared.
    """
