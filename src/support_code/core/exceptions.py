class SupportCodeError(Exception):
    """Base exception for the support code library"""
    pass


class InvalidArgumentError(SupportCodeError):
    """A registration call or setter received an argument of the wrong shape"""
    pass


class ConfigurationError(SupportCodeError):
    """Configuration-related errors"""
    pass


class SupportCodeLoadError(SupportCodeError):
    """A support code file could not be found or imported"""
    pass
