"""
主机输出节点：Pipeline的数据汇，主机侧从其输入队列读取消息
"""

from typing import Dict, Any, Optional, TYPE_CHECKING
from ...core.node import OutputNode
from ...core.message_queue import MessageQueue

if TYPE_CHECKING:
    from ...core.pipeline import Pipeline


class HostOutputNode(OutputNode):
    """主机输出节点"""

    def __init__(
        self,
        pipeline: 'Pipeline',
        node_id: int,
        config: Optional[Dict[str, Any]] = None
    ):
        super().__init__(pipeline, node_id, config)

        default_config = {
            "stream_name": f"host_out_{node_id}",
        }

        self.config = {**default_config, **self.config}
        self._validate_config()

    def _validate_config(self):
        """验证配置参数"""
        if not self.config["stream_name"]:
            raise ValueError("stream_name不能为空")

    def get_queue(self) -> MessageQueue:
        """获取输入队列"""
        return self.input.queue

    def get(self, timeout: Optional[float] = None) -> Any:
        """等待并读取一条消息"""
        return self.input.queue.get(timeout=timeout)

    def try_get(self) -> Optional[Any]:
        """读取一条消息，没有消息时返回None"""
        return self.input.queue.try_get()
