"""Client-side state carried across page loads.

Two stores with different lifetimes are passed in explicitly:
- durable: survives navigation until cleared (referral attribution)
- page: one signup flow (what the confirmation view shows)

The API backs them with persistent and session cookies; the CLI backs them
with a JSON file.
"""

import json
from collections.abc import MutableMapping
from pathlib import Path
from typing import Iterator

from waitlist.logging_config import get_logger
from waitlist.referral.codes import build_referral_link
from waitlist.referral.models import SignupSummary

logger = get_logger(__name__)

# Durable keys
REFERRED_BY = "referredBy"

# Page-scoped keys
WAITLIST_EMAIL = "waitlistEmail"
WAITLIST_NAME = "waitlistName"
REFERRAL_CODE = "referralCode"

DURABLE_KEYS = (REFERRED_BY,)
PAGE_KEYS = (WAITLIST_EMAIL, WAITLIST_NAME, REFERRAL_CODE)


class ClientSession:
    """Explicit client state for one visitor."""

    def __init__(
        self,
        durable: MutableMapping[str, str] | None = None,
        page: MutableMapping[str, str] | None = None,
    ):
        self.durable = durable if durable is not None else {}
        self.page = page if page is not None else {}

    @property
    def referred_by(self) -> str:
        return self.durable.get(REFERRED_BY, "")

    def capture_referral(self, ref_param: str | None) -> str:
        """Record the ``ref`` URL parameter, or fall back to the stored one.

        Args:
            ref_param: Value of the ``ref`` query parameter, if present

        Returns:
            The attribution code in effect ("" if none)
        """
        ref = (ref_param or "").strip()
        if ref:
            self.durable[REFERRED_BY] = ref
            logger.info("referral_captured", referred_by=ref)
            return ref
        return self.referred_by

    def clear_referral(self) -> None:
        self.durable.pop(REFERRED_BY, None)

    def remember_signup(self, name: str, email: str, referral_code: str) -> None:
        """Store the just-submitted signup for the confirmation view."""
        self.page[WAITLIST_EMAIL] = email
        self.page[WAITLIST_NAME] = name
        self.page[REFERRAL_CODE] = referral_code

    def signup_summary(self, site_url: str | None = None) -> SignupSummary | None:
        """Confirmation data for the last signup, or None if there was none."""
        code = self.page.get(REFERRAL_CODE)
        if not code:
            return None

        return SignupSummary(
            name=self.page.get(WAITLIST_NAME, ""),
            email=self.page.get(WAITLIST_EMAIL, ""),
            referral_code=code,
            referral_link=build_referral_link(code, site_url),
        )


class JsonFileStore(MutableMapping):
    """A string mapping persisted in one section of a JSON file.

    Every write rewrites the file, so several stores may share it as long
    as they use different sections.
    """

    def __init__(self, path: Path, section: str):
        self.path = Path(path)
        self.section = section

    def _load_all(self) -> dict[str, dict[str, str]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("client_state_corrupt", path=str(self.path))
            return {}
        return data if isinstance(data, dict) else {}

    def _load(self) -> dict[str, str]:
        section = self._load_all().get(self.section)
        return section if isinstance(section, dict) else {}

    def _save(self, values: dict[str, str]) -> None:
        data = self._load_all()
        data[self.section] = values
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def __getitem__(self, key: str) -> str:
        return self._load()[key]

    def __setitem__(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = value
        self._save(values)

    def __delitem__(self, key: str) -> None:
        values = self._load()
        del values[key]
        self._save(values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._load())

    def __len__(self) -> int:
        return len(self._load())


def file_session(state_dir: Path) -> ClientSession:
    """ClientSession persisted under ``state_dir/client_state.json``."""
    path = Path(state_dir) / "client_state.json"
    return ClientSession(
        durable=JsonFileStore(path, "durable"),
        page=JsonFileStore(path, "page"),
    )
