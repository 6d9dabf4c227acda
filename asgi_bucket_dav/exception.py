class DAVException(Exception):
    pass


class DAVExceptionConfigPaserFailed(DAVException):
    pass


class DAVExceptionStorageInitFailed(DAVException):
    pass


class DAVExceptionStorageFailed(DAVException):
    pass


class DAVExceptionNotImplemented(DAVException):
    pass
