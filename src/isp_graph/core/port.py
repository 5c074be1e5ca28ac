"""
端口模型：节点上的输入/输出端口、端口映射表和连接记录
端口以(group, name)标识，连接由所属Pipeline统一管理
"""

import logging
import weakref
from dataclasses import dataclass, asdict
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Generic, Iterator, List, Optional, TypeVar

from .message import DatatypeEnum, DatatypeHierarchy
from .message_queue import MessageQueue

if TYPE_CHECKING:
    from .node import Node
    from .pipeline import Pipeline


logger = logging.getLogger(__name__)

DEFAULT_BLOCKING = True
DEFAULT_QUEUE_SIZE = 8
DEFAULT_WAIT_FOR_MESSAGE = True


class OutputType(Enum):
    """输出端口类型"""
    M_SENDER = "MSender"
    S_SENDER = "SSender"


class InputType(Enum):
    """输入端口类型"""
    S_RECEIVER = "SReceiver"
    M_RECEIVER = "MReceiver"


def _default_datatypes() -> List[DatatypeHierarchy]:
    return [DatatypeHierarchy(DatatypeEnum.BUFFER, True)]


class Port:
    """端口基类"""

    def __init__(
        self,
        parent: 'Node',
        name: str,
        group: str = "",
        possible_datatypes: Optional[List[DatatypeHierarchy]] = None
    ):
        """
        初始化端口

        Args:
            parent: 所属节点（弱引用保存）
            name: 端口名
            group: 端口组名，空字符串表示静态端口
            possible_datatypes: 可传输的数据类型
        """
        self._parent = weakref.ref(parent)
        self.name = name
        self.group = group
        self.possible_datatypes = list(possible_datatypes or _default_datatypes())

    def get_parent(self) -> 'Node':
        """获取所属节点"""
        node = self._parent()
        if node is None:
            raise RuntimeError(f"端口{self}所属的节点已被销毁")
        return node

    def _get_pipeline(self) -> Optional['Pipeline']:
        node = self._parent()
        if node is None:
            return None
        return node._get_pipeline()

    def __str__(self) -> str:
        if self.group == "":
            return self.name
        return f'{self.group}["{self.name}"]'

    def __repr__(self) -> str:
        node = self._parent()
        node_id = node.id if node is not None else None
        return f"{self.__class__.__name__}(node={node_id}, port={self})"


class Output(Port):
    """输出端口"""

    def __init__(
        self,
        parent: 'Node',
        name: str,
        group: str = "",
        type: OutputType = OutputType.M_SENDER,
        possible_datatypes: Optional[List[DatatypeHierarchy]] = None
    ):
        super().__init__(parent, name, group, possible_datatypes)
        self.type = type

    def _clone(self, group: str, name: str) -> 'Output':
        return Output(self.get_parent(), name, group, self.type, self.possible_datatypes)

    def get_connections(self) -> List['Connection']:
        """获取从该端口出发的所有连接"""
        node = self.get_parent()
        all_connections = node.get_parent_pipeline().get_connections()
        return [
            conn for conn in all_connections
            if conn.output_id == node.id and conn.output_name == self.name and conn.output_group == self.group
        ]

    def is_same_pipeline(self, input_port: 'Input') -> bool:
        """检查该端口与input_port是否属于同一个Pipeline"""
        pipeline = self._get_pipeline()
        if pipeline is None:
            return False
        return pipeline is input_port._get_pipeline()

    def can_connect(self, input_port: 'Input') -> bool:
        """检查是否可以连接到input_port"""
        from .pipeline import Pipeline
        return Pipeline.can_connect(self, input_port)

    def link(self, input_port: 'Input'):
        """连接到input_port"""
        self.get_parent().get_parent_pipeline().link(self, input_port)

    def unlink(self, input_port: 'Input') -> bool:
        """断开与input_port的连接"""
        return self.get_parent().get_parent_pipeline().unlink(self, input_port)

    def _target_inputs(self) -> Iterator['Input']:
        """按连接顺序解析目标输入端口"""
        pipeline = self.get_parent().get_parent_pipeline()
        for conn in self.get_connections():
            # 持有节点引用，保证发送期间节点不会被释放
            node = pipeline.get_node(conn.input_id)
            if node is None:
                logger.debug(f"目标节点{conn.input_id}已被移除，跳过连接 {conn}")
                continue
            for input_port in node.get_input_refs():
                if input_port.group == conn.input_group and input_port.name == conn.input_name:
                    yield input_port

    def send(self, msg: Any):
        """向所有已连接的输入端口发送消息，队列满时阻塞"""
        for input_port in self._target_inputs():
            input_port.queue.send(msg)

    def try_send(self, msg: Any) -> bool:
        """
        尝试向所有已连接的输入端口发送消息

        Returns:
            全部发送成功时为True；已成功投递的消息不会回滚
        """
        success = True
        for input_port in self._target_inputs():
            success &= input_port.queue.try_send(msg)
        return success


class Input(Port):
    """输入端口"""

    def __init__(
        self,
        parent: 'Node',
        name: str,
        group: str = "",
        type: InputType = InputType.S_RECEIVER,
        default_blocking: bool = DEFAULT_BLOCKING,
        default_queue_size: int = DEFAULT_QUEUE_SIZE,
        default_wait_for_message: bool = DEFAULT_WAIT_FOR_MESSAGE,
        possible_datatypes: Optional[List[DatatypeHierarchy]] = None
    ):
        """
        初始化输入端口

        Args:
            parent: 所属节点
            name: 端口名
            group: 端口组名
            type: 输入端口类型
            default_blocking: 未显式设置时的阻塞策略
            default_queue_size: 未显式设置时的队列容量
            default_wait_for_message: 未显式设置时是否等待新消息
            possible_datatypes: 可接受的数据类型
        """
        super().__init__(parent, name, group, possible_datatypes)
        self.type = type
        self.default_blocking = default_blocking
        self.default_queue_size = default_queue_size
        self.default_wait_for_message = default_wait_for_message

        # 显式设置的值，None表示未设置
        self.blocking: Optional[bool] = None
        self.queue_size: Optional[int] = None
        self.wait_for_message: Optional[bool] = None

        self.queue = MessageQueue(str(self), default_queue_size, default_blocking)

    def _clone(self, group: str, name: str) -> 'Input':
        clone = Input(
            self.get_parent(), name, group, self.type,
            self.default_blocking, self.default_queue_size, self.default_wait_for_message,
            self.possible_datatypes
        )
        if self.blocking is not None:
            clone.set_blocking(self.blocking)
        if self.queue_size is not None:
            clone.set_queue_size(self.queue_size)
        clone.wait_for_message = self.wait_for_message
        return clone

    def set_blocking(self, blocking: bool):
        """设置队列满时是否阻塞发送方"""
        self.blocking = blocking
        self.queue.set_blocking(blocking)

    def get_blocking(self) -> bool:
        if self.blocking is not None:
            return self.blocking
        return self.default_blocking

    def set_queue_size(self, size: int):
        """设置队列容量"""
        self.queue.set_max_size(size)
        self.queue_size = size

    def get_queue_size(self) -> int:
        if self.queue_size is not None:
            return self.queue_size
        return self.default_queue_size

    def set_wait_for_message(self, wait_for_message: bool):
        """设置节点是否等待该端口的新消息"""
        self.wait_for_message = wait_for_message

    def get_wait_for_message(self) -> bool:
        if self.wait_for_message is not None:
            return self.wait_for_message
        return self.default_wait_for_message

    def set_reuse_previous_message(self, reuse_previous_message: bool):
        """设置是否复用上一条消息，等价于set_wait_for_message(not reuse)"""
        self.wait_for_message = not reuse_previous_message

    def get_reuse_previous_message(self) -> bool:
        return not self.get_wait_for_message()


PortT = TypeVar("PortT", Output, Input)


class _PortMap(Generic[PortT]):
    """端口映射表：按key懒创建端口，key即端口名，映射表名即端口组名"""

    def __init__(self, name: str, default_port: PortT):
        self.name = name
        self.default_port = default_port
        self._ports: Dict[str, PortT] = {}

    def get_or_create(self, key: str) -> PortT:
        """获取key对应的端口，不存在时以默认端口为模板创建"""
        if key not in self._ports:
            self._ports[key] = self.default_port._clone(group=self.name, name=key)
        return self._ports[key]

    def __getitem__(self, key: str) -> PortT:
        return self._ports[key]

    def __contains__(self, key: str) -> bool:
        return key in self._ports

    def __iter__(self) -> Iterator[str]:
        return iter(self._ports)

    def __len__(self) -> int:
        return len(self._ports)

    def keys(self):
        return self._ports.keys()

    def values(self):
        return self._ports.values()

    def items(self):
        return self._ports.items()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name}, keys={list(self._ports)})"


class OutputMap(_PortMap[Output]):
    """输出端口映射表"""


class InputMap(_PortMap[Input]):
    """输入端口映射表"""


@dataclass(frozen=True)
class Connection:
    """一条Output -> Input连接的不可变记录，只保存节点ID和端口标识"""
    output_id: int
    output_name: str
    output_group: str
    input_id: int
    input_name: str
    input_group: str

    @classmethod
    def from_ports(cls, output: Output, input_port: Input) -> 'Connection':
        """由一对端口创建连接记录，不做合法性检查"""
        return cls(
            output_id=output.get_parent().id,
            output_name=output.name,
            output_group=output.group,
            input_id=input_port.get_parent().id,
            input_name=input_port.name,
            input_group=input_port.group,
        )

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return asdict(self)

    def __str__(self) -> str:
        out_port = self.output_name if self.output_group == "" else f'{self.output_group}["{self.output_name}"]'
        in_port = self.input_name if self.input_group == "" else f'{self.input_group}["{self.input_name}"]'
        return f"{self.output_id}:{out_port} -> {self.input_id}:{in_port}"
