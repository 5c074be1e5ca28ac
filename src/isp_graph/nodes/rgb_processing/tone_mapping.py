"""
Tone Mapping Node: global tone mapping stage between demosaic and output
"""

from typing import Dict, Any, Optional, TYPE_CHECKING
from ...core.node import ProcessingNode
from ...core.port import Input

if TYPE_CHECKING:
    from ...core.pipeline import Pipeline


class ToneMappingNode(ProcessingNode):
    """Tone mapping node using a global operator"""

    def __init__(
        self,
        pipeline: 'Pipeline',
        node_id: int,
        config: Optional[Dict[str, Any]] = None
    ):
        super().__init__(pipeline, node_id, config)

        # Default configuration
        self.config.setdefault("mapping_method", "reinhard")
        self.config.setdefault("exposure", 1.2)
        self.config.setdefault("gamma", 2.2)
        self.config.setdefault("white_point", 1.0)
        self.config.setdefault("black_point", 0.0)

        self._validate_config()

        # Runtime parameter updates; the node keeps using the last one received
        self.input_config = Input(
            self, "input_config",
            default_blocking=False,
            default_queue_size=1,
            default_wait_for_message=False
        )
        self.set_input_refs(self.input_config)

    def _validate_config(self):
        if self.config["mapping_method"] not in ["reinhard", "gamma", "linear"]:
            raise ValueError(f"Unsupported mapping method: {self.config['mapping_method']}")

        if self.config["gamma"] <= 0:
            raise ValueError("gamma must be positive")

        if self.config["white_point"] <= self.config["black_point"]:
            raise ValueError("white_point must be greater than black_point")
