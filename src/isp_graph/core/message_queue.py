"""
消息队列：Input端口持有的有界线程安全队列
支持阻塞发送（背压）与非阻塞发送
"""

import logging
import threading
from collections import deque
from typing import Any, Deque, List, Optional


logger = logging.getLogger(__name__)


class MessageQueue:
    """有界消息队列"""

    def __init__(self, name: str = "", max_size: int = 8, blocking: bool = True):
        """
        初始化消息队列

        Args:
            name: 队列名称（通常为端口名）
            max_size: 最大容量
            blocking: 队列满时send是否阻塞；非阻塞时丢弃最旧的消息
        """
        if max_size < 1:
            raise ValueError(f"队列容量必须为正整数，当前为{max_size}")

        self.name = name
        self._max_size = max_size
        self._blocking = blocking
        self._queue: Deque[Any] = deque()
        self._cond = threading.Condition()

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def blocking(self) -> bool:
        return self._blocking

    def set_max_size(self, max_size: int):
        """设置最大容量"""
        if max_size < 1:
            raise ValueError(f"队列容量必须为正整数，当前为{max_size}")

        with self._cond:
            self._max_size = max_size
            # 容量缩小时丢弃最旧的消息
            while len(self._queue) > self._max_size:
                self._queue.popleft()
            self._cond.notify_all()

    def set_blocking(self, blocking: bool):
        """设置阻塞策略"""
        with self._cond:
            self._blocking = blocking
            self._cond.notify_all()

    def send(self, msg: Any):
        """
        发送消息

        阻塞队列在满时等待直到有空位；非阻塞队列丢弃最旧的消息后入队。
        """
        with self._cond:
            while len(self._queue) >= self._max_size:
                if not self._blocking:
                    self._queue.popleft()
                    logger.debug(f"队列{self.name}已满，丢弃最旧的消息")
                    break
                self._cond.wait()
            self._queue.append(msg)
            self._cond.notify_all()

    def try_send(self, msg: Any) -> bool:
        """
        尝试发送消息，队列满时立即返回False

        Returns:
            是否发送成功
        """
        with self._cond:
            if len(self._queue) >= self._max_size:
                logger.debug(f"队列{self.name}已满，发送失败")
                return False
            self._queue.append(msg)
            self._cond.notify_all()
            return True

    def get(self, timeout: Optional[float] = None) -> Any:
        """
        获取消息，队列为空时等待

        Args:
            timeout: 超时时间（秒），None表示一直等待

        Returns:
            队首消息

        Raises:
            TimeoutError: 超时仍无消息
        """
        with self._cond:
            if not self._cond.wait_for(lambda: len(self._queue) > 0, timeout=timeout):
                raise TimeoutError(f"队列{self.name}等待消息超时")
            msg = self._queue.popleft()
            self._cond.notify_all()
            return msg

    def try_get(self) -> Optional[Any]:
        """尝试获取消息，队列为空时返回None"""
        with self._cond:
            if not self._queue:
                return None
            msg = self._queue.popleft()
            self._cond.notify_all()
            return msg

    def get_all(self) -> List[Any]:
        """取出当前所有消息"""
        with self._cond:
            messages = list(self._queue)
            self._queue.clear()
            self._cond.notify_all()
            return messages

    def is_full(self) -> bool:
        with self._cond:
            return len(self._queue) >= self._max_size

    def __len__(self) -> int:
        with self._cond:
            return len(self._queue)

    def __repr__(self) -> str:
        return (f"MessageQueue(name={self.name}, size={len(self)}/{self._max_size}, "
                f"blocking={self._blocking})")
