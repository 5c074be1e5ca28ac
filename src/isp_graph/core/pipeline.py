"""
Pipeline：节点容器，负责分配节点ID、维护全局连接列表、检查连接合法性
连接列表和节点表由锁保护，读取时返回快照，发送消息时不持有锁
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from .asset import AssetManager
from .message import is_datatype_subclass_of
from .node import Node
from .port import Connection, Input, InputType, Output, OutputType


NodeT = TypeVar("NodeT", bound=Node)

ASSET_URI_PREFIX = "asset:"


class Pipeline:
    """ISP Pipeline描述"""

    def __init__(self, pipeline_id: str = "pipeline"):
        """
        初始化Pipeline

        Args:
            pipeline_id: Pipeline标识，用于日志
        """
        self.pipeline_id = pipeline_id

        # 节点管理
        self._nodes: Dict[int, Node] = {}
        self._latest_id = 0

        # 连接管理
        self._connections: List[Connection] = []
        self._lock = threading.RLock()

        # 全局资源
        self.asset_manager = AssetManager("/")

        # 日志
        self.logger = logging.getLogger(f"Pipeline_{pipeline_id}")

    def create(self, node_class: Type[NodeT], config: Optional[Dict[str, Any]] = None) -> NodeT:
        """
        创建节点并分配ID

        Args:
            node_class: 节点类型
            config: 节点配置

        Returns:
            新建的节点
        """
        with self._lock:
            node_id = self._latest_id
            node = node_class(self, node_id, config)
            self._latest_id += 1
            self._nodes[node_id] = node

        self.logger.info(f"创建节点: {node.get_name()}({node_id})")
        return node

    def remove(self, node: Node) -> bool:
        """
        移除节点及其所有连接

        Args:
            node: 要移除的节点

        Returns:
            是否移除成功
        """
        with self._lock:
            if self._nodes.get(node.id) is not node:
                self.logger.warning(f"节点{node.id}不属于该Pipeline")
                return False

            del self._nodes[node.id]
            self._connections = [
                conn for conn in self._connections
                if conn.output_id != node.id and conn.input_id != node.id
            ]

        self.logger.info(f"移除节点: {node.get_name()}({node.id})")
        return True

    def get_node(self, node_id: int) -> Optional[Node]:
        """获取指定节点"""
        with self._lock:
            return self._nodes.get(node_id)

    def get_all_nodes(self) -> List[Node]:
        """获取所有节点"""
        with self._lock:
            return list(self._nodes.values())

    def get_connections(self) -> List[Connection]:
        """获取所有连接（快照）"""
        with self._lock:
            return list(self._connections)

    @staticmethod
    def can_connect(output: Output, input_port: Input) -> bool:
        """
        检查output能否连接到input_port

        要求两者属于同一Pipeline，收发类型兼容，且至少有一对数据类型匹配
        """
        if not output.is_same_pipeline(input_port):
            return False

        if output.type == OutputType.M_SENDER and input_port.type == InputType.M_RECEIVER:
            return False
        if output.type == OutputType.S_SENDER and input_port.type == InputType.S_RECEIVER:
            return False

        for out_hierarchy in output.possible_datatypes:
            for in_hierarchy in input_port.possible_datatypes:
                if out_hierarchy.datatype == in_hierarchy.datatype:
                    return True
                if in_hierarchy.descendants and is_datatype_subclass_of(in_hierarchy.datatype, out_hierarchy.datatype):
                    return True
                if out_hierarchy.descendants and is_datatype_subclass_of(out_hierarchy.datatype, in_hierarchy.datatype):
                    return True

        return False

    def link(self, output: Output, input_port: Input):
        """
        连接output和input_port

        Raises:
            ValueError: 端口不属于该Pipeline、节点已被移除、端口未注册、不可连接或已连接
        """
        if output._get_pipeline() is not self:
            raise ValueError(f"输出端口{output}不属于Pipeline {self.pipeline_id}")

        if not self.can_connect(output, input_port):
            self.logger.error(f"无法连接: {output} -> {input_port}")
            raise ValueError(f"无法连接: {output} -> {input_port}")

        connection = Connection.from_ports(output, input_port)
        with self._lock:
            # 两端必须是仍在本Pipeline中的节点上已注册的端口
            out_node = output.get_parent()
            in_node = input_port.get_parent()
            self._check_registered(out_node, output, out_node.get_output_ref(output.name, output.group))
            self._check_registered(in_node, input_port, in_node.get_input_ref(input_port.name, input_port.group))

            if connection in self._connections:
                raise ValueError(f"连接已存在: {connection}")
            self._connections.append(connection)

        self.logger.info(f"连接: {connection}")

    def _check_registered(self, node: Node, port: Union[Output, Input], registered: Optional[Union[Output, Input]]):
        if self._nodes.get(node.id) is not node:
            raise ValueError(f"节点{node.get_name()}({node.id})不在Pipeline {self.pipeline_id}中")
        if registered is not port:
            raise ValueError(f"端口{port!r}未在节点{node.get_name()}({node.id})上注册")

    def unlink(self, output: Output, input_port: Input) -> bool:
        """
        断开output和input_port的连接

        Returns:
            是否断开成功
        """
        connection = Connection.from_ports(output, input_port)
        with self._lock:
            if connection not in self._connections:
                self.logger.warning(f"连接不存在: {connection}")
                return False
            self._connections.remove(connection)

        self.logger.info(f"断开连接: {connection}")
        return True

    def load_resource(self, uri: str) -> bytes:
        """以根目录加载资源"""
        return self.load_resource_cwd(uri, "/")

    def load_resource_cwd(self, uri: str, cwd: str) -> bytes:
        """
        加载资源

        Args:
            uri: "asset:<key>"形式的资源URI，或本地文件路径
            cwd: 相对资源键的当前目录，如"/node/<id>/"

        Returns:
            资源内容

        Raises:
            KeyError: 资源不存在
        """
        if not uri.startswith(ASSET_URI_PREFIX):
            return Path(uri).read_bytes()

        key = uri[len(ASSET_URI_PREFIX):]
        if not key.startswith("/"):
            key = cwd + key

        managers = [self.asset_manager] + [node.asset_manager for node in self.get_all_nodes()]
        for manager in managers:
            asset = manager.get(key)
            if asset is not None:
                return asset.data

        raise KeyError(f"资源不存在: {key}")

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "pipeline_id": self.pipeline_id,
            "nodes": {node.id: node.to_dict() for node in self.get_all_nodes()},
            "connections": [conn.to_dict() for conn in self.get_connections()],
            "assets": [asset.key for asset in self.asset_manager.get_all()],
        }

    def __repr__(self) -> str:
        return (f"Pipeline(id={self.pipeline_id}, nodes={len(self._nodes)}, "
                f"connections={len(self._connections)})")
