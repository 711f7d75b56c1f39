#!/usr/bin/env python3
"""
Policy extractor module for reading autoscale thresholds from service labels
"""

import logging
from typing import Callable, Dict, Mapping, Optional, Union

from models import Policy
from models.parsing import parse_decimal, parse_integer
from .exceptions import PolicyParseError

logger = logging.getLogger(__name__)

LABEL_AUTOSCALE = "swarm.autoscale"
LABEL_AUTOSCALE_FILTER = f"{LABEL_AUTOSCALE}=true"
LABEL_AUTOSCALE_CPU = "swarm.autoscale.cpu"
LABEL_AUTOSCALE_MEM = "swarm.autoscale.mem"
LABEL_AUTOSCALE_MIN = "swarm.autoscale.min"
LABEL_AUTOSCALE_MAX = "swarm.autoscale.max"

# Evaluated in this order, the first malformed label aborts extraction
_POLICY_FIELDS = (
    ("cpu_percentage", LABEL_AUTOSCALE_CPU, parse_decimal),
    ("memory_percentage", LABEL_AUTOSCALE_MEM, parse_decimal),
    ("min_replicas", LABEL_AUTOSCALE_MIN, parse_integer),
    ("max_replicas", LABEL_AUTOSCALE_MAX, parse_integer),
)


class PolicyExtractor:
    """Builds a Policy from arbitrary service labels"""

    def extract(self, labels: Optional[Mapping[str, str]]) -> Policy:
        """
        Extract the autoscale policy of a service

        Args:
            labels: Service labels, may be None or missing any policy key

        Returns:
            Policy with unset fields left as None

        Raises:
            PolicyParseError: if a present label is not a valid number
        """
        labels = labels or {}
        values: Dict[str, Union[float, int, None]] = {}

        for field, label, parse in _POLICY_FIELDS:
            values[field] = self._parse_label(labels, label, parse)

        policy = Policy(**values)
        if policy.is_empty():
            logger.debug("No autoscale policy labels set, thresholds default to 0")
        else:
            logger.debug(f"Extracted policy: {policy}")
        return policy

    @staticmethod
    def _parse_label(
        labels: Mapping[str, str],
        label: str,
        parse: Callable[[str], Union[float, int]],
    ) -> Union[float, int, None]:
        raw = labels.get(label)
        if raw is None or raw == "":
            return None

        try:
            return parse(raw)
        except ValueError as e:
            raise PolicyParseError(label, raw) from e
