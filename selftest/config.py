"""Programmatic harness configuration backed by OmegaConf."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from selftest.constants import FailurePolicy, TestClass, Verbosity

logger = logging.getLogger(__name__)


@dataclass
class HarnessConfig:
    """Settings applied to a harness when it is created.

    Attributes
    ----------
    test_class : TestClass
        Class filter deciding which groups ``start_group`` accepts
    verbosity : Verbosity
        How much the harness prints
    failure_policy : FailurePolicy
        Whether a failed check aborts the process or is only recorded
    """

    test_class: TestClass = TestClass.AUTO
    verbosity: Verbosity = Verbosity.ALL
    failure_policy: FailurePolicy = FailurePolicy.ABORT


def load_config(
    overrides: Mapping[str, Any] | Iterable[str] | None = None,
) -> HarnessConfig:
    """Build a harness configuration from built-in defaults and overrides.

    Parameters
    ----------
    overrides : Mapping[str, Any] | Iterable[str] | None
        Either a mapping of field names to values, or dotlist entries such as
        ``"verbosity=NORMAL"``. Enum fields accept member names or members.

    Returns
    -------
    HarnessConfig
        Validated configuration

    Raises
    ------
    ValueError
        If an override names an unknown field or carries an invalid value
    """
    schema = OmegaConf.structured(HarnessConfig)

    if overrides is None:
        return OmegaConf.to_object(schema)

    try:
        if isinstance(overrides, Mapping):
            supplied = OmegaConf.create(dict(overrides))
        else:
            supplied = OmegaConf.from_dotlist(list(overrides))
        merged = OmegaConf.merge(schema, supplied)
    except OmegaConfBaseException as e:
        logger.error("Invalid harness configuration: %s", e)
        raise ValueError(f"Invalid harness configuration: {e}") from e

    return OmegaConf.to_object(merged)
