"""
RAW输入节点：传感器RAW数据源
声明raw图像输出端口和非阻塞的input_control控制输入端口
"""

from typing import Dict, Any, Optional, TYPE_CHECKING
from ...core.node import InputNode
from ...core.message import DatatypeEnum, DatatypeHierarchy
from ...core.port import Input, Output

if TYPE_CHECKING:
    from ...core.pipeline import Pipeline


class RawInputNode(InputNode):
    """RAW输入节点"""

    def __init__(
        self,
        pipeline: 'Pipeline',
        node_id: int,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        初始化RAW输入节点

        Args:
            pipeline: 所属Pipeline
            node_id: 节点ID
            config: 配置参数
        """
        super().__init__(pipeline, node_id, config)

        # 默认配置
        default_config = {
            "input_type": "camera",  # file, simulation, camera
            "file_path": "",
            "bayer_pattern": "rggb",
            "width": 4000,
            "height": 3000,
            "bit_depth": 12,
            "fps": 30.0,
        }

        self.config = {**default_config, **self.config}

        # 验证配置
        self._validate_config()

        # 控制消息只保留最新的几条，不阻塞发送方
        self.input_control = Input(
            self, "input_control",
            default_blocking=False,
            default_queue_size=4,
            default_wait_for_message=False,
            possible_datatypes=[DatatypeHierarchy(DatatypeEnum.BUFFER, False)]
        )
        self.raw = Output(self, "raw", possible_datatypes=[DatatypeHierarchy(DatatypeEnum.IMG_FRAME, False)])

        self.set_input_refs(self.input_control)
        self.set_output_refs(self.raw)

    def _validate_config(self):
        """验证配置参数"""
        if self.config["input_type"] not in ["file", "simulation", "camera"]:
            raise ValueError(f"不支持的输入类型: {self.config['input_type']}")

        if self.config["input_type"] == "file" and not self.config["file_path"]:
            raise ValueError("文件输入模式必须指定file_path")

        if self.config["bayer_pattern"] not in ["rggb", "grbg", "gbrg", "bggr"]:
            raise ValueError(f"不支持的Bayer模式: {self.config['bayer_pattern']}")

        if self.config["width"] <= 0 or self.config["height"] <= 0:
            raise ValueError("图像尺寸必须大于0")

        if self.config["bit_depth"] not in [8, 10, 12, 14, 16]:
            raise ValueError(f"不支持的位深度: {self.config['bit_depth']}")

        if self.config["fps"] <= 0:
            raise ValueError("帧率必须大于0")
