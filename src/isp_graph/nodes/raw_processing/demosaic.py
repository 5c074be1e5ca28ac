"""
去马赛克节点：将RAW Bayer数据转换为RGB图像
输入端口只接受ImgFrame
"""

from typing import Dict, Any, Optional, TYPE_CHECKING
from ...core.node import ProcessingNode

if TYPE_CHECKING:
    from ...core.pipeline import Pipeline


class DemosaicNode(ProcessingNode):
    """去马赛克节点"""

    def __init__(
        self,
        pipeline: 'Pipeline',
        node_id: int,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        初始化去马赛克节点

        Args:
            pipeline: 所属Pipeline
            node_id: 节点ID
            config: 配置参数
        """
        super().__init__(pipeline, node_id, config)

        # 默认配置
        default_config = {
            "classic_method": "bilinear",  # bilinear, vng, edge_aware
            "output_format": "rgb",        # rgb, bgr
        }

        self.config = {**default_config, **self.config}

        # 验证配置
        self._validate_config()

    def _validate_config(self):
        """验证配置参数"""
        classic_methods = ["bilinear", "vng", "edge_aware"]
        if self.config["classic_method"] not in classic_methods:
            raise ValueError(f"不支持的经典方法: {self.config['classic_method']}")

        if self.config["output_format"] not in ["rgb", "bgr"]:
            raise ValueError(f"不支持的输出格式: {self.config['output_format']}")
