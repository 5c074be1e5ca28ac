"""
配置加载：从YAML描述创建Pipeline
节点以别名声明，连接端点写作"别名.端口"或"别名.端口组[key]"
"""

import logging
import re
from typing import Any, Dict, Optional, Tuple, Type

import yaml

from .core.node import Node
from .core.pipeline import Pipeline
from .core.port import Input, Output
from .nodes import (
    RawInputNode, DemosaicNode, ToneMappingNode,
    FrameSyncNode, MessageDemuxNode, HostOutputNode
)


logger = logging.getLogger(__name__)

NODE_TYPES: Dict[str, Type[Node]] = {
    cls.__name__: cls
    for cls in (RawInputNode, DemosaicNode, ToneMappingNode, FrameSyncNode, MessageDemuxNode, HostOutputNode)
}

_PORT_PATTERN = re.compile(r'^(?P<port>[^.\[\]]+)(?:\[(?P<key>[^\]]+)\])?$')


def load_config(config_path: str) -> Dict[str, Any]:
    """加载配置文件"""
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except Exception as e:
        logger.error(f"加载配置文件失败: {e}")
        return {}


def parse_port(spec: str) -> Tuple[str, str]:
    """
    解析端口描述

    Args:
        spec: "name" 或 "group[key]"，key可带引号

    Returns:
        (group, name)
    """
    match = _PORT_PATTERN.match(spec.strip())
    if match is None:
        raise ValueError(f"无效的端口描述: {spec}")

    key = match.group("key")
    if key is None:
        return "", match.group("port")
    return match.group("port"), key.strip().strip('"\'')


def parse_endpoint(spec: str) -> Tuple[str, str, str]:
    """
    解析连接端点

    Args:
        spec: "alias.port" 或 "alias.group[key]"

    Returns:
        (alias, group, name)
    """
    alias, sep, port_spec = spec.partition(".")
    if not sep or not alias:
        raise ValueError(f"无效的连接端点: {spec}")
    group, name = parse_port(port_spec)
    return alias, group, name


def _resolve_output(node: Node, group: str, name: str) -> Output:
    if group:
        output_map = node.get_output_map(group)
        if output_map is None:
            raise ValueError(f"节点{node.get_name()}({node.id})没有输出端口组{group}")
        return output_map.get_or_create(name)

    output = node.get_output_ref(name)
    if output is None:
        raise ValueError(f"节点{node.get_name()}({node.id})没有输出端口{name}")
    return output


def _resolve_input(node: Node, group: str, name: str) -> Input:
    if group:
        input_map = node.get_input_map(group)
        if input_map is None:
            raise ValueError(f"节点{node.get_name()}({node.id})没有输入端口组{group}")
        return input_map.get_or_create(name)

    input_port = node.get_input_ref(name)
    if input_port is None:
        raise ValueError(f"节点{node.get_name()}({node.id})没有输入端口{name}")
    return input_port


def _require_bool(settings: Dict[str, Any], key: str) -> bool:
    value = settings[key]
    if not isinstance(value, bool):
        raise ValueError(f"{key}必须为布尔值，当前为{value!r}")
    return value


def _apply_input_settings(input_port: Input, settings: Dict[str, Any]):
    """应用输入端口的显式设置"""
    if "blocking" in settings:
        input_port.set_blocking(_require_bool(settings, "blocking"))
    if "queue_size" in settings:
        queue_size = settings["queue_size"]
        if isinstance(queue_size, bool) or not isinstance(queue_size, int):
            raise ValueError(f"queue_size必须为整数，当前为{queue_size!r}")
        input_port.set_queue_size(queue_size)
    if "wait_for_message" in settings:
        input_port.set_wait_for_message(_require_bool(settings, "wait_for_message"))
    if "reuse_previous_message" in settings:
        input_port.set_reuse_previous_message(_require_bool(settings, "reuse_previous_message"))


def create_pipeline_from_config(
    config: Dict[str, Any],
    node_types: Optional[Dict[str, Type[Node]]] = None
) -> Tuple[Pipeline, Dict[str, Node]]:
    """
    根据配置创建pipeline

    Args:
        config: 配置字典，顶层为pipeline
        node_types: 节点类型表，默认使用NODE_TYPES

    Returns:
        (Pipeline, 别名 -> 节点)

    Raises:
        ValueError: 未知节点类型、无效端点或非法连接
    """
    node_types = node_types or NODE_TYPES
    pipeline_config = config.get("pipeline", {})
    pipeline_name = pipeline_config.get("name", "default_pipeline")

    # 创建Pipeline
    pipeline = Pipeline(pipeline_name)

    # 创建节点
    nodes: Dict[str, Node] = {}
    for alias, node_config in (pipeline_config.get("nodes") or {}).items():
        node_type = node_config.get("type")
        if node_type not in node_types:
            raise ValueError(f"未知的节点类型: {node_type}")

        node = pipeline.create(node_types[node_type], node_config.get("config") or {})
        nodes[alias] = node

        for port_spec, settings in (node_config.get("inputs") or {}).items():
            group, name = parse_port(port_spec)
            _apply_input_settings(_resolve_input(node, group, name), settings or {})

    # 连接节点
    for connection in pipeline_config.get("connections") or []:
        from_alias, from_group, from_name = parse_endpoint(connection["from"])
        to_alias, to_group, to_name = parse_endpoint(connection["to"])

        if from_alias not in nodes or to_alias not in nodes:
            raise ValueError(f"连接引用了不存在的节点: {connection['from']} -> {connection['to']}")

        output = _resolve_output(nodes[from_alias], from_group, from_name)
        input_port = _resolve_input(nodes[to_alias], to_group, to_name)
        output.link(input_port)

    logger.info(f"从配置创建Pipeline: {pipeline}")
    return pipeline, nodes
