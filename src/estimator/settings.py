"""Application settings loaded from YAML."""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

from schemas.enums import PaymentOption

from .payments import CREDIT_CARD_FEE_PERCENT, FinanceSettings

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


class AppSettings(BaseModel):
    data_dir: Path = Field(default=Path("data"), description="Directory holding the JSON documents")
    company_name: str = Field(default="CoolSeason HVAC")
    company_address: str = ""
    company_phone: str = ""
    company_email: str = ""
    company_license: str = Field(default="", description="Contractor license number")
    company_website: str = ""
    estimate_number_prefix: str = Field(default="CS-", description="Prefix for generated estimate numbers")
    payment_option: PaymentOption = PaymentOption.CASH_CHECK_ZELLE
    credit_card_fee_percent: float = Field(default=CREDIT_CARD_FEE_PERCENT, ge=0)
    finance: FinanceSettings = Field(default_factory=FinanceSettings)

    def company_contact(self) -> List[str]:
        """Non-empty company contact lines for estimate headers."""
        lines = [self.company_address]
        lines.append("  ".join(
            f"{label}: {value}"
            for label, value in (("Phone", self.company_phone), ("Email", self.company_email))
            if value
        ))
        if self.company_license:
            lines.append(f"License #{self.company_license}")
        lines.append(self.company_website.lower())
        return [line for line in lines if line]


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return data


def load_settings(path: Optional[Path] = None) -> AppSettings:
    """
    Load the packaged defaults, then overlay a user settings file.

    Nested mappings (``finance``) are merged key by key.

    Args:
        path: Optional user settings YAML

    Returns:
        Validated AppSettings
    """
    data = _read_yaml(DEFAULT_SETTINGS_PATH)
    if path is not None:
        overrides = _read_yaml(Path(path))
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        logger.debug(f"Loaded settings overrides from {path}")
    return AppSettings.model_validate(data)
