"""
Exceptions raised by the BRC Navigator core
"""


class NavigatorError(Exception):
    """Base exception for navigator errors"""
    pass


class ParseError(NavigatorError):
    """Raised when source data is empty or cannot be parsed into headers and rows"""
    pass


class FetchError(NavigatorError):
    """Raised when a spreadsheet URL is invalid or cannot be downloaded"""
    pass


class UnsupportedFileType(NavigatorError):
    """Raised when an uploaded file is not CSV, XLS or XLSX"""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Unsupported file type: {filename}")


class SearchError(NavigatorError):
    """Raised when the search service fails or answers outside the expected schema"""
    pass
