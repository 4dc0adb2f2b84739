# errors.py


class LeadScoringError(Exception):
    status_code = 500

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)
        self.message = message


class InvalidInput(LeadScoringError):
    status_code = 400


class InvalidCSV(InvalidInput):
    pass


class UploadTooLarge(LeadScoringError):
    status_code = 413


class NoOfferConfigured(LeadScoringError):
    status_code = 400

    def __init__(self, message: str = "No offer found. POST /api/v1/offer first."):
        super().__init__(message)


class NoUnscoredLeads(LeadScoringError):
    status_code = 400

    def __init__(self, message: str = "No unscored leads found."):
        super().__init__(message)


class NoResults(LeadScoringError):
    status_code = 404


class BackendUnavailable(LeadScoringError):
    """Raised by an LLM backend when the provider call itself fails."""

    status_code = 502
