class DanceScoreException(Exception):
    code = '000'
    message = ''

    def __init__(self, code: str = None, message: str = None):
        if code:
            self.code = code
        if message:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'code': self.code, 'message': self.message}


class CatalogError(DanceScoreException):
    """Raised when an angle catalog entry is malformed."""
    code = '001'
    message = 'Invalid angle catalog'


class TrackOrderError(DanceScoreException):
    """Raised when a reference track is not sorted by timestamp."""
    code = '002'
    message = 'Reference track timestamps must be non-decreasing'
