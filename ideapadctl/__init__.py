"""Control IdeaPad battery and performance modes through acpi_call."""

__version__ = "0.1.0"
