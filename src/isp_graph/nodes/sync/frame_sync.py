"""
帧同步节点：把多路输入按时间戳对齐后打包为MessageGroup
输入端口通过inputs映射表按名称动态创建
"""

from typing import Dict, Any, Optional, TYPE_CHECKING
from ...core.node import Node, NodeType
from ...core.message import DatatypeEnum, DatatypeHierarchy
from ...core.port import Input, InputMap, Output

if TYPE_CHECKING:
    from ...core.pipeline import Pipeline


class FrameSyncNode(Node):
    """帧同步节点"""

    node_type = NodeType.PROCESSING

    def __init__(
        self,
        pipeline: 'Pipeline',
        node_id: int,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        初始化帧同步节点

        Args:
            pipeline: 所属Pipeline
            node_id: 节点ID
            config: 配置参数
        """
        super().__init__(pipeline, node_id, config)

        # 默认配置
        default_config = {
            "sync_threshold_ms": 10.0,
            "sync_attempts": -1,  # -1表示一直等待
        }

        self.config = {**default_config, **self.config}

        # 验证配置
        self._validate_config()

        # 每路输入的模板：非阻塞、只缓存少量帧
        self.inputs = InputMap("inputs", Input(self, "", default_blocking=False, default_queue_size=2))
        self.out = Output(self, "out", possible_datatypes=[DatatypeHierarchy(DatatypeEnum.MESSAGE_GROUP, False)])

        self.set_input_map_refs(self.inputs)
        self.set_output_refs(self.out)

    def _validate_config(self):
        """验证配置参数"""
        if self.config["sync_threshold_ms"] < 0:
            raise ValueError("同步阈值不能为负数")

        if not isinstance(self.config["sync_attempts"], int) or self.config["sync_attempts"] < -1:
            raise ValueError(f"无效的同步尝试次数: {self.config['sync_attempts']}")
