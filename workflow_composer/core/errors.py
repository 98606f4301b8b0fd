from typing import Optional


class PipelineError(Exception):
    """Base class for failures that terminate a pipeline run."""

    code = "pipeline_error"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage


class CredentialMissingError(PipelineError):
    code = "credential_missing"

    def __init__(self, service: str, credential_name: str, stage: Optional[str] = None):
        super().__init__(f"{credential_name} not configured for {service}", stage=stage)
        self.service = service
        self.credential_name = credential_name


class ProviderError(PipelineError):
    code = "provider_error"

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        stage: Optional[str] = None,
    ):
        prefix = f"{provider} API error"
        if status_code is not None:
            prefix = f"{prefix} ({status_code})"
        super().__init__(f"{prefix}: {message}", stage=stage)
        self.provider = provider
        self.status_code = status_code
        self.provider_message = message


class OrchestrationFailedError(PipelineError):
    code = "orchestration_failed"
