# tcping/errors.py


class TcpingError(Exception):
    """Base class for errors that abort a run before probing starts."""


class ValidationError(TcpingError):
    pass


class ResolutionError(TcpingError):
    pass


class FamilyMismatch(ResolutionError):
    pass


class ResolutionFailed(ResolutionError):
    pass


class NoAddressForFamily(ResolutionError):
    pass
