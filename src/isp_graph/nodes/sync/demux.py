"""
消息拆分节点：把MessageGroup按名称拆分到outputs映射表中的各个输出端口
"""

from typing import Dict, Any, Optional, TYPE_CHECKING
from ...core.node import Node, NodeType
from ...core.message import DatatypeEnum, DatatypeHierarchy
from ...core.port import Input, Output, OutputMap

if TYPE_CHECKING:
    from ...core.pipeline import Pipeline


class MessageDemuxNode(Node):
    """消息拆分节点"""

    node_type = NodeType.PROCESSING

    def __init__(
        self,
        pipeline: 'Pipeline',
        node_id: int,
        config: Optional[Dict[str, Any]] = None
    ):
        super().__init__(pipeline, node_id, config)

        self.input = Input(self, "input", possible_datatypes=[DatatypeHierarchy(DatatypeEnum.MESSAGE_GROUP, False)])
        self.outputs = OutputMap("outputs", Output(self, ""))

        self.set_input_refs(self.input)
        self.set_output_map_refs(self.outputs)
