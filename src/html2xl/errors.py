"""Exceptions raised while converting HTML tables to workbooks"""


class ConversionError(Exception):
    """Base class for all conversion failures"""


class StyleParseError(ConversionError):
    """An inline CSS declaration could not be parsed"""

    def __init__(self, message, property=None, value=None, table_id=None):
        self.property = property
        self.value = value
        self.table_id = table_id
        super().__init__(message)

    def for_table(self, table_id):
        """Return a copy of this error tagged with the table it came from"""
        return StyleParseError(
            f"Table '{table_id}': {self}",
            property=self.property,
            value=self.value,
            table_id=table_id
        )


class IdentifierCollisionError(ConversionError):
    """Two tables in one conversion share the same id"""

    def __init__(self, table_id):
        self.table_id = table_id
        super().__init__(f"Duplicate table id '{table_id}'")


class EmptyDocumentError(ConversionError):
    """The document has no table to convert"""

    def __init__(self, message="No <table> element found in HTML content"):
        super().__init__(message)
