"""Custom exception classes for fragment storage and conversion."""


class FragmentsError(Exception):
    """
    Base exception class for all fragment-related errors.
    """
    pass


class FragmentNotFoundError(FragmentsError):
    """
    Raised when a fragment does not exist or is not owned by the caller.
    """

    def __init__(self, fragment_id: str):
        self.fragment_id = fragment_id
        super().__init__(f"Fragment {fragment_id} not found")


class OwnerMismatchError(FragmentNotFoundError):
    """
    Raised when the stored owner differs from the caller.

    Carries the same message as FragmentNotFoundError so the two cannot be
    told apart by a non-owner.
    """
    pass


class UnsupportedTypeError(FragmentsError):
    """
    Raised when a MIME type is outside the allow-list.
    """

    def __init__(self, type_: str):
        self.type = type_
        super().__init__(f"Unsupported content type: {type_}")


class InvalidDataError(FragmentsError):
    """
    Raised when a payload is not a byte buffer, or is unusable for the operation.
    """
    pass


class ConversionUnsupportedError(FragmentsError):
    """
    Raised when a conversion pair is not in the capability table.
    """

    def __init__(self, from_type: str, to_type: str, message: str = None):
        self.from_type = from_type
        self.to_type = to_type
        if message is None:
            message = f"Conversion from {from_type} to {to_type} is not supported"
        super().__init__(message)


class BackendFailureError(FragmentsError):
    """
    Raised when the metadata index or the blob store fails with an I/O error.
    """
    pass
