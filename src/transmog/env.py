"""Environment-driven configuration for transmog.

Values are read from ``os.environ`` on every access so tests and the CLI can
change them at runtime.
"""

from __future__ import annotations

import logging
import os

ENV_TRANSMOG_MAX_DEPTH = "TRANSMOG_MAX_DEPTH"
ENV_TRANSMOG_USER_MODULES = "TRANSMOG_USER_MODULES"
ENV_TRANSMOG_LIBRARY_MODULES = "TRANSMOG_LIBRARY_MODULES"
ENV_TRANSMOG_LOG_LEVEL = "TRANSMOG_LOG_LEVEL"

DEFAULT_MAX_DEPTH = 200
DEFAULT_LOG_LEVEL = "WARNING"

# Always treated as library namespaces
BUILTIN_LIBRARY_MODULES: tuple[str, ...] = ("transmog",)


def _split_modules(raw: str) -> list[str]:
	parts = raw.replace(",", os.pathsep).split(os.pathsep)
	return [p.strip() for p in parts if p.strip()]


class TransmogEnv:
	"""Typed accessors over the TRANSMOG_* environment variables."""

	__slots__: tuple[str, ...] = ()

	@property
	def max_depth(self) -> int:
		raw = os.environ.get(ENV_TRANSMOG_MAX_DEPTH)
		if not raw:
			return DEFAULT_MAX_DEPTH
		try:
			value = int(raw)
		except ValueError:
			raise ValueError(
				f"{ENV_TRANSMOG_MAX_DEPTH} must be an integer, got {raw!r}"
			) from None
		if value < 1:
			raise ValueError(f"{ENV_TRANSMOG_MAX_DEPTH} must be positive, got {value}")
		return value

	@max_depth.setter
	def max_depth(self, value: int) -> None:
		os.environ[ENV_TRANSMOG_MAX_DEPTH] = str(value)

	@property
	def user_modules(self) -> list[str]:
		return _split_modules(os.environ.get(ENV_TRANSMOG_USER_MODULES, ""))

	@user_modules.setter
	def user_modules(self, value: list[str]) -> None:
		os.environ[ENV_TRANSMOG_USER_MODULES] = os.pathsep.join(value)

	@property
	def library_modules(self) -> list[str]:
		configured = _split_modules(os.environ.get(ENV_TRANSMOG_LIBRARY_MODULES, ""))
		return [*BUILTIN_LIBRARY_MODULES, *configured]

	@library_modules.setter
	def library_modules(self, value: list[str]) -> None:
		os.environ[ENV_TRANSMOG_LIBRARY_MODULES] = os.pathsep.join(value)

	@property
	def log_level(self) -> int:
		raw = os.environ.get(ENV_TRANSMOG_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper()
		level = logging.getLevelName(raw)
		if not isinstance(level, int):
			raise ValueError(f"{ENV_TRANSMOG_LOG_LEVEL} is not a log level: {raw!r}")
		return level


env = TransmogEnv()
