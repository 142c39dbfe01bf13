#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Error types raised by the translation pipeline.

Every error is terminal for the current invocation; nothing here is retried.
"""


class TranslationError(Exception):
    """翻译流程中所有错误的基类"""


class MissingCredentialError(TranslationError):
    """未配置API密钥，在发起任何网络请求之前抛出"""

    def __init__(self, message="缺少Gemini API密钥，请通过 --api-key 或环境变量设置"):
        super().__init__(message)


class TranslationServiceError(TranslationError):
    """翻译服务返回非成功状态或网络请求失败

    Attributes:
        status: HTTP状态码，网络失败时为None
        body: 原始错误响应内容
    """

    def __init__(self, status, body):
        self.status = status
        self.body = body
        if status is None:
            message = f"翻译服务请求失败: {body}"
        else:
            message = f"翻译服务错误: {status} {body}"
        super().__init__(message)


class EmptyResponseError(TranslationError):
    """翻译服务没有返回可用的文本"""

    def __init__(self, message="翻译服务没有返回译文"):
        super().__init__(message)


class MismatchedResponseError(TranslationError):
    """批量翻译返回的数组长度与请求不一致

    Attributes:
        expected: 请求中的文本数量
        got: 响应中的文本数量
    """

    def __init__(self, expected, got, message=None):
        self.expected = expected
        self.got = got
        if message is None:
            message = f"译文数组长度不匹配: 期望 {expected} 个，实际 {got} 个"
        super().__init__(message)


class MalformedResponseError(MismatchedResponseError):
    """翻译服务的响应即使经过修复也无法解析为字符串数组

    无法解析的响应同样无法与请求对齐，所以它是 MismatchedResponseError 的一种，got 为 None。
    """

    def __init__(self, expected, raw):
        self.raw = raw
        super().__init__(expected, None, message="响应格式异常，无法解析为JSON数组")
