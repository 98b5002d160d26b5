"""Reading ``newsbrew.yaml`` into a validated ``AppConfig``."""

import hashlib
import time
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from newsbrew.config.defaults import default_config
from newsbrew.config.error_hints import format_validation_error
from newsbrew.config.schemas import AppConfig


logger = structlog.get_logger()

ErrorDetail = dict[str, str]


class ConfigValidationError(Exception):
    """The configuration file could not be read, parsed or validated.

    ``errors`` holds one ``{"loc", "msg", "type"}`` dict per problem, with
    ``loc`` a dotted path such as ``sources.0.driver``.
    """

    def __init__(self, errors: list[ErrorDetail], file_path: str) -> None:
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")

    def format_errors(self, *, include_hint: bool = True) -> list[str]:
        return [
            format_validation_error(
                e["loc"], e["msg"], e["type"], include_hint=include_hint
            )
            for e in self.errors
        ]


def _detail(loc: str, msg: str, error_type: str) -> ErrorDetail:
    return {"loc": loc, "msg": msg, "type": error_type}


def _details_from(exc: ValidationError) -> list[ErrorDetail]:
    return [
        _detail(".".join(map(str, err["loc"])) or "config", err["msg"], err["type"])
        for err in exc.errors()
    ]


class ConfigLoader:
    """Loads one configuration file per CLI invocation.

    When the file is absent and not ``required``, the built-in profile of
    public sources is returned and ``used_defaults`` is set.
    """

    def __init__(self, run_id: str) -> None:
        self._log = logger.bind(component="config", run_id=run_id)
        self._checksum: str | None = None
        self._used_defaults = False
        self._errors: list[ErrorDetail] = []
        self._duration_ms = 0.0

    @property
    def checksum(self) -> str | None:
        """SHA-256 of the file read, None when defaults were used."""
        return self._checksum

    @property
    def used_defaults(self) -> bool:
        return self._used_defaults

    @property
    def validation_errors(self) -> list[ErrorDetail]:
        return list(self._errors)

    @property
    def validation_duration_ms(self) -> float:
        return self._duration_ms

    def load(self, path: Path, *, required: bool = False) -> AppConfig:
        """Read and validate ``path``.

        Args:
            path: YAML file; ``~`` is expanded.
            required: Treat a missing file as an error.

        Raises:
            ConfigValidationError: The file is missing (when required),
                is not valid YAML, or fails schema validation.
        """
        started = time.perf_counter()
        path = path.expanduser()
        log = self._log.bind(file_path=str(path))

        if not required and not path.exists():
            self._used_defaults = True
            log.info("config_defaults_used")
            return default_config()

        log.info("loading_config_file")
        try:
            raw = path.read_bytes()
            self._checksum = hashlib.sha256(raw).hexdigest()
            data = yaml.safe_load(raw.decode("utf-8"))
            config = AppConfig.model_validate({} if data is None else data)
        except FileNotFoundError as e:
            raise self._fail(path, [_detail("file", str(e), "file_not_found")]) from e
        except yaml.YAMLError as e:
            raise self._fail(path, [_detail("yaml", str(e), "yaml_parse_error")]) from e
        except ValidationError as e:
            raise self._fail(path, _details_from(e)) from e

        self._duration_ms = (time.perf_counter() - started) * 1000
        log.info(
            "config_loaded",
            file_sha256=self._checksum,
            source_count=len(config.sources),
            config_validation_duration_ms=self._duration_ms,
        )
        return config

    def _fail(self, path: Path, errors: list[ErrorDetail]) -> ConfigValidationError:
        self._errors = errors
        self._log.error(
            "config_validation_failed",
            file_path=str(path),
            error_count=len(errors),
            errors=errors,
        )
        return ConfigValidationError(self.validation_errors, str(path))
