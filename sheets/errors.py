class SheetsError(RuntimeError):
    """Token exchange or spreadsheet append failed."""


class CredentialsNotConfigured(RuntimeError):
    """No service-account key is available to sign with."""
