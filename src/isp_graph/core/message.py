"""
消息类型：在端口之间流动的数据模型
包含Buffer基类、图像帧ImgFrame、帧组MessageGroup，以及数据类型层级
"""

import numpy as np
import cv2
from typing import Dict, Any, Optional, Iterator, Tuple
from dataclasses import dataclass
from enum import Enum


class DatatypeEnum(Enum):
    """数据类型枚举"""
    BUFFER = "Buffer"
    IMG_FRAME = "ImgFrame"
    MESSAGE_GROUP = "MessageGroup"


# 子类型 -> 父类型
_DATATYPE_PARENTS: Dict[DatatypeEnum, DatatypeEnum] = {
    DatatypeEnum.IMG_FRAME: DatatypeEnum.BUFFER,
    DatatypeEnum.MESSAGE_GROUP: DatatypeEnum.BUFFER,
}


def is_datatype_subclass_of(parent: DatatypeEnum, child: DatatypeEnum) -> bool:
    """
    检查child是否（严格）派生自parent

    Args:
        parent: 父类型
        child: 子类型

    Returns:
        child是否为parent的后代
    """
    current = _DATATYPE_PARENTS.get(child)
    while current is not None:
        if current == parent:
            return True
        current = _DATATYPE_PARENTS.get(current)
    return False


@dataclass(frozen=True)
class DatatypeHierarchy:
    """端口可接受的数据类型，descendants表示是否同时接受其子类型"""
    datatype: DatatypeEnum
    descendants: bool = True


class ColorFormat(Enum):
    """颜色格式枚举"""
    RAW_BAYER = "raw_bayer"
    RAW_MONO = "raw_mono"
    RGB = "rgb"
    BGR = "bgr"
    YUV = "yuv"
    GRAY = "gray"


class BayerPattern(Enum):
    """Bayer模式枚举"""
    RGGB = "rggb"
    GRBG = "grbg"
    GBRG = "gbrg"
    BGGR = "bggr"


# Bayer模式 -> OpenCV转换码
_BAYER_TO_BGR = {
    BayerPattern.RGGB: cv2.COLOR_BayerRG2BGR,
    BayerPattern.GRBG: cv2.COLOR_BayerGR2BGR,
    BayerPattern.GBRG: cv2.COLOR_BayerGB2BGR,
    BayerPattern.BGGR: cv2.COLOR_BayerBG2BGR,
}


class Buffer:
    """所有消息的基类"""

    datatype = DatatypeEnum.BUFFER

    def __init__(
        self,
        data: Optional[Any] = None,
        timestamp: float = 0.0,
        sequence_num: int = 0,
        metadata: Optional[Dict[str, Any]] = None
    ):
        self.data = np.asarray(data) if data is not None else np.empty(0, dtype=np.uint8)
        self.timestamp = timestamp
        self.sequence_num = sequence_num
        self.metadata = metadata or {}

    def get_data(self) -> np.ndarray:
        """获取原始数据"""
        return self.data

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(seq={self.sequence_num}, "
                f"timestamp={self.timestamp:.3f}s, size={self.data.size})")


class ImgFrame(Buffer):
    """图像帧消息"""

    datatype = DatatypeEnum.IMG_FRAME

    def __init__(
        self,
        data: np.ndarray,
        color_format: ColorFormat = ColorFormat.RAW_BAYER,
        bayer_pattern: Optional[BayerPattern] = None,
        timestamp: float = 0.0,
        sequence_num: int = 0,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """
        初始化ImgFrame

        Args:
            data: 图像数据 (H, W, C) 或 (H, W)
            color_format: 颜色格式
            bayer_pattern: Bayer模式（仅RAW Bayer格式需要）
            timestamp: 时间戳
            sequence_num: 帧序号
            metadata: 其他元数据
        """
        super().__init__(data, timestamp, sequence_num, metadata)
        self.color_format = color_format
        self.bayer_pattern = bayer_pattern

        # 验证数据格式
        self._validate_data()

    def _validate_data(self):
        """验证数据格式"""
        if self.data.ndim not in [2, 3]:
            raise ValueError(f"数据维度必须是2或3，当前为{self.data.ndim}")

        if self.color_format == ColorFormat.RAW_BAYER and self.bayer_pattern is None:
            raise ValueError("RAW Bayer格式必须指定bayer_pattern")

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def channels(self) -> int:
        return 1 if self.data.ndim == 2 else self.data.shape[2]

    @property
    def shape(self) -> tuple:
        return self.data.shape

    def get_cv_frame(self) -> np.ndarray:
        """
        转换为OpenCV可直接显示的BGR（或灰度）图像

        Returns:
            BGR图像，单通道格式返回灰度图
        """
        if self.color_format == ColorFormat.RAW_BAYER:
            return cv2.cvtColor(self.data, _BAYER_TO_BGR[self.bayer_pattern])
        if self.color_format == ColorFormat.RGB:
            return cv2.cvtColor(self.data, cv2.COLOR_RGB2BGR)
        if self.color_format == ColorFormat.YUV:
            return cv2.cvtColor(self.data, cv2.COLOR_YUV2BGR)
        # BGR / GRAY / RAW_MONO 无需转换
        return self.data.copy()

    def copy(self) -> 'ImgFrame':
        """复制ImgFrame"""
        return ImgFrame(
            data=self.data.copy(),
            color_format=self.color_format,
            bayer_pattern=self.bayer_pattern,
            timestamp=self.timestamp,
            sequence_num=self.sequence_num,
            metadata=self.metadata.copy()
        )

    def __repr__(self) -> str:
        return (f"ImgFrame(shape={self.shape}, format={self.color_format.value}, "
                f"timestamp={self.timestamp:.3f}s)")


class MessageGroup(Buffer):
    """帧组消息：按名称保存多条同步后的消息"""

    datatype = DatatypeEnum.MESSAGE_GROUP

    def __init__(
        self,
        messages: Optional[Dict[str, Buffer]] = None,
        timestamp: float = 0.0,
        sequence_num: int = 0,
        metadata: Optional[Dict[str, Any]] = None
    ):
        super().__init__(None, timestamp, sequence_num, metadata)
        self.messages: Dict[str, Buffer] = dict(messages or {})

    def add(self, name: str, message: Buffer):
        """添加消息"""
        self.messages[name] = message

    def get_interval(self) -> Tuple[float, float]:
        """获取组内消息的时间范围"""
        if not self.messages:
            return (0.0, 0.0)

        timestamps = [msg.timestamp for msg in self.messages.values()]
        return (min(timestamps), max(timestamps))

    def __len__(self) -> int:
        return len(self.messages)

    def __getitem__(self, name: str) -> Buffer:
        return self.messages[name]

    def __contains__(self, name: str) -> bool:
        return name in self.messages

    def __iter__(self) -> Iterator[str]:
        return iter(self.messages)

    def __repr__(self) -> str:
        return (f"MessageGroup(names={list(self.messages)}, "
                f"interval={self.get_interval()})")
