class TypeMapperError(Exception):
    """Base exception for all type mapping errors."""


class UnsupportedTypeError(TypeMapperError):
    """Exception raised when a primitive has no entry in the primary type table."""
    def __init__(self, message: str):
        super().__init__(message)


class UnknownTypeError(TypeMapperError):
    """Exception raised when a defined type is neither an account, a custom type nor an alias."""
    def __init__(self, message: str):
        super().__init__(message)


class MissingNameError(TypeMapperError):
    """Exception raised when an enum is mapped without a name."""
    def __init__(self, message: str):
        super().__init__(message)


class ConflictingEnumDefinitionError(TypeMapperError):
    """Exception raised when the same enum is registered with different variants."""
    def __init__(self, message: str):
        super().__init__(message)


class UnknownSerdePackageError(TypeMapperError):
    """Exception raised when a type table entry references an unknown package."""
    def __init__(self, message: str):
        super().__init__(message)
