from sqlalchemy.orm import Session

from zerthyx.core.config import get_settings, parse_blockchains
from zerthyx.core.errors import LedgerValidationError
from zerthyx.models import AdminSetting
from zerthyx.services.ledger import commit_unit
from zerthyx.utils.cache import get_cached, invalidate_cached, set_cached

DEPOSIT_ADDRESS_PREFIX = "deposit_address_"
_CACHE_PREFIX = "admin_setting:"


def supported_blockchains() -> list[str]:
    return parse_blockchains(get_settings().supported_blockchains)


def normalize_blockchain(value: str | None) -> str:
    raw = (value or "").strip().upper()
    allowed = supported_blockchains()
    if raw not in allowed:
        raise LedgerValidationError(
            f"Unsupported blockchain '{value}'.",
            hint=f"Use one of: {', '.join(allowed)}.",
        )
    return raw


def list_settings(db: Session) -> dict[str, str]:
    rows = db.query(AdminSetting).order_by(AdminSetting.setting_key).all()
    return {row.setting_key: row.setting_value for row in rows}


def get_setting(db: Session, key: str, default: str | None = None) -> str | None:
    cache_key = f"{_CACHE_PREFIX}{key}"
    cached = get_cached(cache_key)
    if cached is not None:
        return cached
    row = db.query(AdminSetting).filter(AdminSetting.setting_key == key).first()
    if row is None:
        return default
    set_cached(cache_key, row.setting_value, ttl_seconds=60)
    return row.setting_value


def set_settings(db: Session, values: dict[str, str]) -> dict[str, str]:
    for key, value in values.items():
        key = (key or "").strip()
        if not key:
            raise LedgerValidationError("Setting key must not be empty.")
        row = db.query(AdminSetting).filter(AdminSetting.setting_key == key).first()
        if row is None:
            db.add(AdminSetting(setting_key=key, setting_value=str(value)))
        else:
            row.setting_value = str(value)
    commit_unit(db)
    invalidate_cached(_CACHE_PREFIX)
    return list_settings(db)


def get_deposit_address(db: Session, blockchain: str) -> str | None:
    value = get_setting(db, f"{DEPOSIT_ADDRESS_PREFIX}{blockchain.lower()}")
    value = (value or "").strip()
    return value or None


def get_deposit_addresses(db: Session) -> dict[str, str]:
    addresses = {}
    for chain in supported_blockchains():
        address = get_deposit_address(db, chain)
        if address:
            addresses[chain] = address
    return addresses
