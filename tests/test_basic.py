#!/usr/bin/env python3
"""
基本功能测试
测试消息类型、数据类型层级、Pipeline节点管理和资源加载
"""

import gc
import sys
import tempfile
import time
import unittest
from pathlib import Path

import numpy as np

# 添加src目录到Python路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from isp_graph.core.message import (
    Buffer, ImgFrame, MessageGroup, ColorFormat, BayerPattern,
    DatatypeEnum, is_datatype_subclass_of
)
from isp_graph.core.node import NodeType
from isp_graph.core.pipeline import Pipeline
from isp_graph.nodes import RawInputNode, DemosaicNode, HostOutputNode, FrameSyncNode


class TestImgFrame(unittest.TestCase):
    """测试ImgFrame类"""

    def setUp(self):
        """测试前准备"""
        self.test_data = np.random.randint(0, 255, (100, 100), dtype=np.uint8)

    def test_frame_creation(self):
        """测试ImgFrame创建"""
        frame = ImgFrame(
            data=self.test_data,
            color_format=ColorFormat.RAW_BAYER,
            bayer_pattern=BayerPattern.RGGB,
            timestamp=time.time(),
            sequence_num=3
        )

        self.assertEqual(frame.shape, (100, 100))
        self.assertEqual(frame.height, 100)
        self.assertEqual(frame.width, 100)
        self.assertEqual(frame.channels, 1)
        self.assertEqual(frame.sequence_num, 3)
        self.assertEqual(frame.datatype, DatatypeEnum.IMG_FRAME)

    def test_frame_validation(self):
        """测试ImgFrame验证"""
        # RAW Bayer必须指定Bayer模式
        with self.assertRaises(ValueError):
            ImgFrame(data=self.test_data, color_format=ColorFormat.RAW_BAYER)

        # 无效的数据维度
        invalid_data = np.zeros((10, 10, 3, 2), dtype=np.uint8)
        with self.assertRaises(ValueError):
            ImgFrame(data=invalid_data, color_format=ColorFormat.RGB)

    def test_frame_copy(self):
        """测试ImgFrame复制是深拷贝"""
        frame = ImgFrame(data=self.test_data, bayer_pattern=BayerPattern.GRBG)
        frame_copy = frame.copy()

        frame.data[0, 0] = 7
        frame_copy.data[0, 0] = 9
        self.assertNotEqual(frame.data[0, 0], frame_copy.data[0, 0])
        self.assertEqual(frame_copy.bayer_pattern, BayerPattern.GRBG)

    def test_cv_frame_rgb_to_bgr(self):
        """测试RGB转BGR"""
        data = np.zeros((4, 4, 3), dtype=np.uint8)
        data[..., 0] = 255  # R通道
        frame = ImgFrame(data=data, color_format=ColorFormat.RGB)

        bgr = frame.get_cv_frame()
        self.assertEqual(bgr.shape, (4, 4, 3))
        self.assertTrue(np.all(bgr[..., 2] == 255))
        self.assertTrue(np.all(bgr[..., 0] == 0))

    def test_cv_frame_bayer(self):
        """测试Bayer去马赛克为BGR"""
        frame = ImgFrame(data=self.test_data, bayer_pattern=BayerPattern.RGGB)
        bgr = frame.get_cv_frame()
        self.assertEqual(bgr.shape, (100, 100, 3))

    def test_cv_frame_gray_is_copy(self):
        """测试灰度图直接复制"""
        frame = ImgFrame(data=self.test_data, color_format=ColorFormat.GRAY)
        gray = frame.get_cv_frame()
        self.assertTrue(np.array_equal(gray, self.test_data))
        self.assertIsNot(gray, frame.data)


class TestMessageGroup(unittest.TestCase):
    """测试MessageGroup类"""

    def test_group_operations(self):
        """测试MessageGroup操作"""
        group = MessageGroup()
        self.assertEqual(len(group), 0)
        self.assertEqual(group.get_interval(), (0.0, 0.0))

        group.add("rgb", Buffer(timestamp=1.0))
        group.add("raw", Buffer(timestamp=1.5))

        self.assertEqual(len(group), 2)
        self.assertIn("rgb", group)
        self.assertEqual(list(group), ["rgb", "raw"])
        self.assertEqual(group["raw"].timestamp, 1.5)
        self.assertEqual(group.get_interval(), (1.0, 1.5))
        self.assertEqual(group.datatype, DatatypeEnum.MESSAGE_GROUP)


class TestDatatypeHierarchy(unittest.TestCase):
    """测试数据类型层级"""

    def test_subclass(self):
        self.assertTrue(is_datatype_subclass_of(DatatypeEnum.BUFFER, DatatypeEnum.IMG_FRAME))
        self.assertTrue(is_datatype_subclass_of(DatatypeEnum.BUFFER, DatatypeEnum.MESSAGE_GROUP))
        self.assertFalse(is_datatype_subclass_of(DatatypeEnum.IMG_FRAME, DatatypeEnum.BUFFER))
        self.assertFalse(is_datatype_subclass_of(DatatypeEnum.BUFFER, DatatypeEnum.BUFFER))
        self.assertFalse(is_datatype_subclass_of(DatatypeEnum.IMG_FRAME, DatatypeEnum.MESSAGE_GROUP))


class TestPipeline(unittest.TestCase):
    """测试Pipeline类"""

    def setUp(self):
        """测试前准备"""
        self.pipeline = Pipeline("test_pipeline")

    def test_pipeline_creation(self):
        """测试Pipeline创建"""
        self.assertEqual(self.pipeline.pipeline_id, "test_pipeline")
        self.assertEqual(len(self.pipeline.get_all_nodes()), 0)
        self.assertEqual(self.pipeline.get_connections(), [])

    def test_create_nodes(self):
        """测试创建节点并分配ID"""
        raw = self.pipeline.create(RawInputNode)
        demosaic = self.pipeline.create(DemosaicNode, {"classic_method": "vng"})
        out = self.pipeline.create(HostOutputNode)

        self.assertEqual([raw.id, demosaic.id, out.id], [0, 1, 2])
        self.assertIs(self.pipeline.get_node(1), demosaic)
        self.assertIsNone(self.pipeline.get_node(42))
        self.assertIs(raw.get_parent_pipeline(), self.pipeline)
        self.assertEqual(demosaic.get_config()["classic_method"], "vng")
        self.assertEqual(raw.node_type, NodeType.INPUT)
        self.assertEqual(out.node_type, NodeType.OUTPUT)

    def test_invalid_node_config(self):
        """测试无效节点配置"""
        with self.assertRaises(ValueError):
            self.pipeline.create(DemosaicNode, {"classic_method": "nearest"})
        with self.assertRaises(ValueError):
            self.pipeline.create(RawInputNode, {"bit_depth": 11})
        with self.assertRaises(ValueError):
            self.pipeline.create(RawInputNode, {"input_type": "file"})

        # 失败的创建不占用节点表
        self.assertEqual(self.pipeline.get_all_nodes(), [])

    def test_set_config_revalidates(self):
        """测试set_config重新验证"""
        demosaic = self.pipeline.create(DemosaicNode)
        demosaic.set_config({"output_format": "bgr"})
        self.assertEqual(demosaic.config["output_format"], "bgr")

        with self.assertRaises(ValueError):
            demosaic.set_config({"output_format": "yuv"})

    def test_remove_node_drops_connections(self):
        """测试移除节点同时移除相关连接"""
        raw = self.pipeline.create(RawInputNode)
        demosaic = self.pipeline.create(DemosaicNode)
        out = self.pipeline.create(HostOutputNode)

        raw.raw.link(demosaic.input)
        demosaic.output.link(out.input)
        self.assertEqual(len(self.pipeline.get_connections()), 2)

        self.assertTrue(self.pipeline.remove(demosaic))
        self.assertEqual(self.pipeline.get_connections(), [])
        self.assertIsNone(self.pipeline.get_node(demosaic.id))

        # 重复移除失败
        self.assertFalse(self.pipeline.remove(demosaic))

    def test_to_dict(self):
        """测试转换为字典"""
        raw = self.pipeline.create(RawInputNode)
        sync = self.pipeline.create(FrameSyncNode)
        raw.raw.link(sync.inputs.get_or_create("raw"))

        description = self.pipeline.to_dict()
        self.assertEqual(description["pipeline_id"], "test_pipeline")
        self.assertEqual(set(description["nodes"]), {raw.id, sync.id})

        sync_inputs = description["nodes"][sync.id]["inputs"]
        self.assertEqual(sync_inputs, [{
            "group": "inputs",
            "name": "raw",
            "type": "SReceiver",
            "blocking": False,
            "queue_size": 2,
            "wait_for_message": True,
        }])
        self.assertEqual(description["connections"], [{
            "output_id": raw.id,
            "output_name": "raw",
            "output_group": "",
            "input_id": sync.id,
            "input_name": "raw",
            "input_group": "inputs",
        }])

    def test_dead_pipeline(self):
        """测试Pipeline被释放后节点无法解析Pipeline"""
        pipeline = Pipeline("temporary")
        raw = pipeline.create(RawInputNode)
        out = pipeline.create(HostOutputNode)

        del pipeline
        gc.collect()

        with self.assertRaises(RuntimeError):
            raw.get_parent_pipeline()
        self.assertFalse(raw.raw.is_same_pipeline(out.input))


class TestResources(unittest.TestCase):
    """测试资源加载"""

    def setUp(self):
        self.pipeline = Pipeline("resources")
        self.node = self.pipeline.create(DemosaicNode)

    def test_node_asset_root(self):
        """测试节点资源键以/node/<id>/为前缀"""
        asset = self.node.get_asset_manager().set("lut.bin", b"\x01\x02")
        self.assertEqual(asset.key, f"/node/{self.node.id}/lut.bin")
        self.assertEqual(asset.size, 2)

    def test_load_relative_asset(self):
        """测试以节点目录加载相对资源"""
        self.node.asset_manager.set("lut.bin", b"lut")
        self.assertEqual(self.node.load_resource("asset:lut.bin"), b"lut")
        self.assertEqual(
            self.pipeline.load_resource_cwd("asset:lut.bin", f"/node/{self.node.id}/"),
            b"lut"
        )

    def test_load_pipeline_asset(self):
        """测试加载Pipeline全局资源"""
        self.pipeline.asset_manager.set("calib.json", b"{}")
        self.assertEqual(self.pipeline.load_resource("asset:calib.json"), b"{}")
        self.assertEqual(self.node.load_resource("asset:/calib.json"), b"{}")

    def test_missing_asset(self):
        """测试资源不存在"""
        with self.assertRaises(KeyError):
            self.node.load_resource("asset:missing.bin")

    def test_load_file(self):
        """测试加载本地文件"""
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "model.blob"
            path.write_bytes(b"blob")
            self.assertEqual(self.node.load_resource(str(path)), b"blob")

            # 资源也可以从文件添加
            asset = self.pipeline.asset_manager.set("model.blob", path)
            self.assertEqual(asset.data, b"blob")


if __name__ == "__main__":
    unittest.main()
