"""
节点基类：声明端口、端口映射表，并提供统一的端口枚举和查找
节点由Pipeline创建并分配ID，端口存储归具体节点类型所有
"""

import copy
import weakref
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .asset import AssetManager
from .message import DatatypeEnum, DatatypeHierarchy
from .port import Input, InputMap, Output, OutputMap, Port

if TYPE_CHECKING:
    from .pipeline import Pipeline


class NodeType(Enum):
    """节点类型枚举"""
    INPUT = "input"
    PROCESSING = "processing"
    OUTPUT = "output"


class Node:
    """ISP节点基类"""

    node_type = NodeType.PROCESSING

    def __init__(
        self,
        pipeline: 'Pipeline',
        node_id: int,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        初始化节点，一般通过Pipeline.create调用

        Args:
            pipeline: 所属Pipeline（弱引用保存）
            node_id: Pipeline分配的节点ID
            config: 配置参数
        """
        self._pipeline = weakref.ref(pipeline)
        self.id = node_id
        self.config: Dict[str, Any] = dict(config or {})
        self.asset_manager = AssetManager(f"/node/{node_id}/")

        # 端口注册表，只保存引用，端口本身是子类的成员
        self.output_refs: Dict[Tuple[str, str], Output] = {}
        self.input_refs: Dict[Tuple[str, str], Input] = {}
        self.output_map_refs: Dict[str, OutputMap] = {}
        self.input_map_refs: Dict[str, InputMap] = {}

    def _validate_config(self):
        """验证配置参数"""
        pass

    def get_name(self) -> str:
        """节点类型名"""
        return self.__class__.__name__

    def _get_pipeline(self) -> Optional['Pipeline']:
        return self._pipeline()

    def get_parent_pipeline(self) -> 'Pipeline':
        """获取所属Pipeline"""
        pipeline = self._pipeline()
        if pipeline is None:
            raise RuntimeError(f"节点{self.id}所属的Pipeline已被销毁")
        return pipeline

    def set_config(self, config: Dict[str, Any]):
        """设置配置参数"""
        self.config.update(config)
        self._validate_config()

    def get_config(self) -> Dict[str, Any]:
        """获取配置参数"""
        return self.config.copy()

    def get_asset_manager(self) -> AssetManager:
        return self.asset_manager

    def load_resource(self, uri: str) -> bytes:
        """以"/node/<id>/"为当前目录加载资源"""
        return self.get_parent_pipeline().load_resource_cwd(uri, f"/node/{self.id}/")

    # 端口注册
    # 同一节点同一方向上(group, name)唯一：静态端口的group不能与映射表重名

    @staticmethod
    def _register_port(refs: Dict[Tuple[str, str], Port], map_refs: Dict[str, Any], port: Port):
        key = (port.group, port.name)
        if refs.get(key, port) is not port:
            raise ValueError(f"端口{port}已存在")
        if port.group in map_refs:
            raise ValueError(f"端口{port}与端口组{port.group}冲突")
        refs[key] = port

    @staticmethod
    def _register_map(refs: Dict[Tuple[str, str], Port], map_refs: Dict[str, Any], port_map: Any):
        if map_refs.get(port_map.name, port_map) is not port_map:
            raise ValueError(f"端口组{port_map.name}已存在")
        if any(group == port_map.name for group, _ in refs):
            raise ValueError(f"端口组{port_map.name}与已注册的端口冲突")
        map_refs[port_map.name] = port_map

    def set_output_refs(self, *outputs: Output):
        for output in outputs:
            self._register_port(self.output_refs, self.output_map_refs, output)

    def set_input_refs(self, *inputs: Input):
        for input_port in inputs:
            self._register_port(self.input_refs, self.input_map_refs, input_port)

    def set_output_map_refs(self, *output_maps: OutputMap):
        for output_map in output_maps:
            self._register_map(self.output_refs, self.output_map_refs, output_map)

    def set_input_map_refs(self, *input_maps: InputMap):
        for input_map in input_maps:
            self._register_map(self.input_refs, self.input_map_refs, input_map)

    # 端口枚举与查找

    def get_output_refs(self) -> List[Output]:
        """获取所有输出端口：先静态端口，再按注册顺序列出各映射表中的端口"""
        refs = list(self.output_refs.values())
        for output_map in self.output_map_refs.values():
            refs.extend(output_map.values())
        return refs

    def get_input_refs(self) -> List[Input]:
        """获取所有输入端口：先静态端口，再按注册顺序列出各映射表中的端口"""
        refs = list(self.input_refs.values())
        for input_map in self.input_map_refs.values():
            refs.extend(input_map.values())
        return refs

    def get_outputs(self) -> List[Output]:
        """获取所有输出端口的副本"""
        return [copy.copy(output) for output in self.get_output_refs()]

    def get_inputs(self) -> List[Input]:
        """获取所有输入端口的副本（与原端口共享队列）"""
        return [copy.copy(input_port) for input_port in self.get_input_refs()]

    def get_output_ref(self, name: str, group: str = "") -> Optional[Output]:
        """按(group, name)查找输出端口，不存在时返回None"""
        for output in self.get_output_refs():
            if output.group == group and output.name == name:
                return output
        return None

    def get_input_ref(self, name: str, group: str = "") -> Optional[Input]:
        """按(group, name)查找输入端口，不存在时返回None"""
        for input_port in self.get_input_refs():
            if input_port.group == group and input_port.name == name:
                return input_port
        return None

    def get_output_map_refs(self) -> List[OutputMap]:
        return list(self.output_map_refs.values())

    def get_input_map_refs(self) -> List[InputMap]:
        return list(self.input_map_refs.values())

    def get_output_map(self, name: str) -> Optional[OutputMap]:
        return self.output_map_refs.get(name)

    def get_input_map(self, name: str) -> Optional[InputMap]:
        return self.input_map_refs.get(name)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "id": self.id,
            "name": self.get_name(),
            "node_type": self.node_type.value,
            "config": self.config,
            "outputs": [
                {"group": output.group, "name": output.name, "type": output.type.value}
                for output in self.get_output_refs()
            ],
            "inputs": [
                {
                    "group": input_port.group,
                    "name": input_port.name,
                    "type": input_port.type.value,
                    "blocking": input_port.get_blocking(),
                    "queue_size": input_port.get_queue_size(),
                    "wait_for_message": input_port.get_wait_for_message(),
                }
                for input_port in self.get_input_refs()
            ],
        }

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(id={self.id}, "
                f"type={self.node_type.value}, "
                f"outputs={len(self.get_output_refs())}, "
                f"inputs={len(self.get_input_refs())})")


_IMG_FRAME_ONLY = [DatatypeHierarchy(DatatypeEnum.IMG_FRAME, True)]


class InputNode(Node):
    """输入节点基类（数据源），不声明默认端口"""

    node_type = NodeType.INPUT


class ProcessingNode(Node):
    """处理节点基类，默认声明input/output两个图像端口"""

    node_type = NodeType.PROCESSING

    def __init__(
        self,
        pipeline: 'Pipeline',
        node_id: int,
        config: Optional[Dict[str, Any]] = None
    ):
        super().__init__(pipeline, node_id, config)

        # 默认输入输出端口
        self.input = Input(self, "input", possible_datatypes=_IMG_FRAME_ONLY)
        self.output = Output(self, "output", possible_datatypes=_IMG_FRAME_ONLY)
        self.set_input_refs(self.input)
        self.set_output_refs(self.output)


class OutputNode(Node):
    """输出节点基类（数据汇），默认声明input端口"""

    node_type = NodeType.OUTPUT

    def __init__(
        self,
        pipeline: 'Pipeline',
        node_id: int,
        config: Optional[Dict[str, Any]] = None
    ):
        super().__init__(pipeline, node_id, config)

        self.input = Input(self, "input")
        self.set_input_refs(self.input)
