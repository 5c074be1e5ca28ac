#!/usr/bin/env python3
"""
ISP Pipeline 描述工具
从YAML配置构建Pipeline并输出节点、端口和连接的描述
"""

import sys
import argparse
import logging
import yaml
from pathlib import Path

# 添加src目录到Python路径
sys.path.insert(0, str(Path(__file__).parent / "src"))

from isp_graph.config import load_config, create_pipeline_from_config


def setup_logging(level: str = "INFO"):
    """设置日志"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def describe_pipeline(config_path: str, output_path: str = "") -> bool:
    """构建并输出Pipeline描述"""
    config = load_config(config_path)
    if not config:
        print("❌ 配置加载失败")
        return False

    try:
        pipeline, nodes = create_pipeline_from_config(config)
    except ValueError as e:
        print(f"❌ Pipeline构建失败: {e}")
        logging.error(f"Pipeline构建失败: {e}", exc_info=True)
        return False

    print(f"✅ {pipeline}")
    for alias, node in nodes.items():
        print(f"  {alias}: {node}")
        for output in node.get_output_refs():
            for conn in output.get_connections():
                print(f"    {conn}")

    description = yaml.safe_dump(pipeline.to_dict(), allow_unicode=True, sort_keys=False)
    if output_path:
        Path(output_path).write_text(description, encoding='utf-8')
        print(f"📁 描述已写入: {output_path}")
    else:
        print(description)

    return True


def main():
    """主函数"""
    parser = argparse.ArgumentParser(description="ISP Pipeline 描述工具")
    parser.add_argument(
        "--config",
        type=str,
        default=str(Path(__file__).parent / "configs" / "photo_mode.yaml"),
        help="配置文件路径"
    )
    parser.add_argument(
        "--output",
        type=str,
        default="",
        help="描述输出文件（YAML），默认打印到终端"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="日志级别"
    )

    args = parser.parse_args()

    # 设置日志
    setup_logging(args.log_level)

    # 检查配置文件是否存在
    if not Path(args.config).exists():
        print(f"❌ 配置文件不存在: {args.config}")
        return 1

    print(f"📁 使用配置文件: {args.config}")
    return 0 if describe_pipeline(args.config, args.output) else 1


if __name__ == "__main__":
    sys.exit(main())
