from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import yaml

from qiwi.infra.http.remote_transport import DEFAULT_BASE_URL


@dataclass(frozen=True)
class Settings:
    # Credentials
    phone: str | None = None
    token: str | None = None

    # API
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 20.0
    tls_skip_verify: bool = False
    ca_file: str | None = None

    # Logging
    log_dir: str = "./logs"
    log_level: str = "INFO"


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


def defaultConfigPath() -> Path:
    """
    Назначение:
        Путь к конфигу CLI: $XDG_CONFIG_HOME/qiwi-cli/config.yml (по умолчанию ~/.config).
    """
    base = _env_get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "qiwi-cli" / "config.yml"


def _read_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def _parse_float(v: str | None) -> float | None:
    if v is None:
        return None
    return float(v)


def _parse_bool(v: str | None) -> bool | None:
    if v is None:
        return None
    vv = v.lower()
    if vv in ("1", "true", "yes", "y"):
        return True
    if vv in ("0", "false", "no", "n"):
        return False
    raise ValueError(f"Invalid boolean env value: {v}")


def loadSettings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Priority: CLI > ENV > config > defaults
    """
    sources: list[str] = []
    defaults = Settings()

    # 1) config file
    path = Path(config_path) if config_path else defaultConfigPath()
    cfg = _read_yaml_config(path)
    if cfg:
        sources.append("config")

    merged = {
        "phone": cfg.get("phone", defaults.phone),
        "token": cfg.get("token", defaults.token),
        "base_url": cfg.get("base_url", defaults.base_url),
        "timeout_seconds": cfg.get("timeout_seconds", defaults.timeout_seconds),
        "tls_skip_verify": cfg.get("tls_skip_verify", defaults.tls_skip_verify),
        "ca_file": cfg.get("ca_file", defaults.ca_file),
        "log_dir": cfg.get("log_dir", defaults.log_dir),
        "log_level": cfg.get("log_level", defaults.log_level),
    }
    # YAML превращает номер телефона без кавычек в int
    if merged["phone"] is not None:
        merged["phone"] = str(merged["phone"])

    # 2) env
    env = {
        "phone": _env_get("QIWI_PHONE"),
        "token": _env_get("QIWI_TOKEN"),
        "base_url": _env_get("QIWI_BASE_URL"),
        "timeout_seconds": _parse_float(_env_get("QIWI_TIMEOUT_SECONDS")),
        "tls_skip_verify": _parse_bool(_env_get("QIWI_TLS_SKIP_VERIFY")),
        "ca_file": _env_get("QIWI_CA_FILE"),
        "log_dir": _env_get("QIWI_LOG_DIR"),
        "log_level": _env_get("QIWI_LOG_LEVEL"),
    }
    if any(v is not None for v in env.values()):
        sources.append("env")

    for k, v in env.items():
        if v is None:
            continue
        merged[k] = v

    # 3) apply CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")

    for k, v in cli_overrides.items():
        if v is None:
            continue
        merged[k] = v

    settings = Settings(
        phone=merged["phone"],
        token=merged["token"],
        base_url=merged["base_url"],
        timeout_seconds=float(merged["timeout_seconds"]),
        tls_skip_verify=bool(merged["tls_skip_verify"]),
        ca_file=merged["ca_file"],
        log_dir=merged["log_dir"],
        log_level=merged["log_level"],
    )

    return LoadedSettings(settings=settings, sources_used=sources)


def saveCredentials(path: str | Path, phone: str, token: str) -> Path:
    """
    Назначение:
        Сохраняет {phone, token} в YAML-конфиг, создавая каталоги.
    Ограничения:
        Остальные ключи существующего конфига сохраняются.
    """
    target = Path(path)
    data = _read_yaml_config(target)
    data["phone"] = phone
    data["token"] = token
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, allow_unicode=True, sort_keys=True)
    return target


__all__ = ["Settings", "LoadedSettings", "defaultConfigPath", "loadSettings", "saveCredentials"]
