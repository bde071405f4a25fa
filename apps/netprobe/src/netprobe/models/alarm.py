"""OLT alarm and diagnosis models."""

from pydantic import BaseModel


class OltAlarm(BaseModel):
    """One alarm line as reported by an OLT."""

    timestamp: str
    severity: str
    source: str
    status: str
    name: str
    description: str

    @property
    def is_active(self) -> bool:
        return self.status == "Active"


class OltDiagnosis(BaseModel):
    """Root-cause suggestion for an ONU, with the terminal output it came from."""

    alarm_type: str | None = None
    # Slot/port/ONU identifier the alarm was raised on, as the OLT prints it
    alarm_code: str | None = None
    description: str
    diagnosis: str
    raw_output: str = ""


class ConnectionCheck(BaseModel):
    """Result of an OLT connectivity test."""

    success: bool
    message: str
