"""Configuration package (Facade).

This package acts as a small *Facade* over the underlying configuration modules.
Callers import every config type from one stable path instead of knowing which module
defines it:

	from envseed.services.config import PlatformConfig

The public API of the package is defined by ``__all__``.
"""

from envseed.services.config.batch_config import BatchRunnerConfig
from envseed.services.config.environment_config import EnvironmentConfig
from envseed.services.config.exchange_rates_config import ExchangeRatesConfig
from envseed.services.config.platform_config import PlatformConfig
from envseed.services.config.portal_config import PortalConfig
from envseed.services.config.s3_config import S3Config

__all__ = [
	"BatchRunnerConfig",
	"EnvironmentConfig",
	"ExchangeRatesConfig",
	"PlatformConfig",
	"PortalConfig",
	"S3Config",
]
