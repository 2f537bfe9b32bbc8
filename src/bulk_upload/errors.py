class BulkUploadError(Exception):
    """Structural upload failure: nothing in the file gets processed."""

    status_code = 400


class EmptyFileError(BulkUploadError):
    pass


class UnreadableFileError(BulkUploadError):
    pass


class StoreNotFoundError(BulkUploadError):
    status_code = 404
