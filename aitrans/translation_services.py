#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
aitrans 的翻译服务模块

这个模块实现了基于大模型的翻译服务:
1. 批量翻译协议：一次请求翻译一组文本，响应必须是等长同序的JSON数组
2. 整段翻译：纯文本按上下文整体翻译
3. HTML整体翻译：保留标签结构的兜底方案
4. Gemini generateContent 接口的实现
"""

import asyncio
import json
import time
from dataclasses import dataclass
from typing import List, Optional

import requests

from aitrans.config import (
    DEFAULT_MODEL,
    DEFAULT_SOURCE_LANGUAGE,
    DEFAULT_TARGET_LANGUAGE,
    GEMINI_ENDPOINT,
    GEMINI_HEADERS,
)
from aitrans.errors import (
    EmptyResponseError,
    MalformedResponseError,
    MismatchedResponseError,
    MissingCredentialError,
    TranslationServiceError,
)


def _source_info(source_language, scope):
    if source_language == "auto":
        return f"Detect the source language from the {scope}."
    return f"The source language is {source_language}."


def build_chunks_prompt(texts: List[str], source_language: str, target_language: str) -> str:
    """构建批量翻译的提示词，文本以JSON数组的形式嵌入

    Args:
        texts: 要翻译的文本列表
        source_language: 源语言代码，'auto' 表示自动检测
        target_language: 目标语言代码

    Returns:
        str: 提示词
    """
    input_json = json.dumps(texts, ensure_ascii=False)
    return (
        f"{_source_info(source_language, 'entire set')}\n"
        f"Translate each array item into {target_language}. "
        f"Return ONLY a valid JSON array of strings (same length, same order).\n"
        f"Rules:\n"
        f"- Translate only human language; keep numbers, URLs, code, and emojis unchanged.\n"
        f"- Do not add, remove, merge, or reorder items.\n"
        f"- Do not wrap the array in quotes, backticks, or explanations.\n"
        f"Input: {input_json}"
    )


def build_passage_prompt(text: str, source_language: str, target_language: str) -> str:
    """构建整段翻译的提示词"""
    return (
        f"You are a senior professional translator. {_source_info(source_language, 'entire passage')} "
        f"Translate the entire passage into {target_language}, respecting its context and discourse.\n"
        f"Requirements:\n"
        f"- Preserve meaning, intent, tone, and register; do not translate word-by-word.\n"
        f"- Use the full passage for context; resolve pronouns and references and keep terminology consistent.\n"
        f"- Prefer natural, idiomatic {target_language}.\n"
        f"- Keep numbers, URLs, code snippets, emoji, and product names unchanged when appropriate.\n"
        f"- Preserve inline formatting, punctuation, line breaks, and paragraph structure.\n"
        f"- If the text includes lists or headings, keep their structure.\n"
        f"Output only the translated text, with no explanations or quotation marks.\n"
        f"Text:\n{text}"
    )


def build_html_prompt(html_content: str, source_language: str, target_language: str) -> str:
    """构建保留结构的HTML整体翻译提示词"""
    return (
        f"{_source_info(source_language, 'entire HTML fragment')}\n"
        f"You will be given an HTML fragment. Translate ONLY human-visible text into {target_language}, "
        f"preserving the original HTML structure and all tags and attributes.\n"
        f"Strict rules:\n"
        f"- Do not add, remove, or reorder HTML tags.\n"
        f"- Keep attributes (including classes and ids) unchanged.\n"
        f"- Preserve inline formatting (e.g., <strong>, <em>, <code>, <a>, lists, headings, line breaks).\n"
        f"- Keep URLs and code content unchanged unless they contain human language to translate.\n"
        f"- Return ONLY the translated HTML fragment, no explanations, no code fences.\n"
        f"HTML:\n{html_content}"
    )


def _find_json_array(raw: str):
    """从自由文本中找出第一个可以解析的JSON数组"""
    decoder = json.JSONDecoder()
    start = raw.find("[")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(raw, start)
        except ValueError:
            value = None
        if isinstance(value, list):
            return value
        start = raw.find("[", start + 1)
    return None


def _coerce_item(item) -> str:
    if isinstance(item, str):
        return item
    return json.dumps(item, ensure_ascii=False)


def parse_translation_array(raw: str, expected: int) -> List[str]:
    """解析批量翻译的响应

    先按JSON整体解析；失败时从文本中截取第一个JSON数组再解析。
    元素类型宽松（非字符串转为字符串），数量严格。

    Args:
        raw: 翻译服务返回的原始文本
        expected: 请求中的文本数量

    Returns:
        List[str]: 与请求等长同序的译文

    Raises:
        MalformedResponseError: 无法解析为数组
        MismatchedResponseError: 数组长度与请求不一致
    """
    try:
        value = json.loads(raw)
    except ValueError:
        value = _find_json_array(raw)

    if not isinstance(value, list):
        raise MalformedResponseError(expected, raw)
    if len(value) != expected:
        raise MismatchedResponseError(expected, len(value))
    return [_coerce_item(item) for item in value]


@dataclass
class TranslationRequest:
    """一次批量翻译请求"""
    units: List[str]
    source_language: str
    target_language: str
    model: str

    def prompt(self) -> str:
        return build_chunks_prompt(self.units, self.source_language, self.target_language)


@dataclass
class TranslationResponse:
    """一次批量翻译的响应，values 与请求的 units 等长同序"""
    values: List[str]

    @classmethod
    def from_raw(cls, raw: str, request: TranslationRequest) -> "TranslationResponse":
        return cls(parse_translation_array(raw, len(request.units)))


class TranslationService:
    """翻译服务的基类，定义了通用接口

    子类只需要实现 generate()：输入提示词，返回模型生成的文本。
    """

    service_name = "翻译服务"

    def __init__(self, api_key: Optional[str] = None, model=DEFAULT_MODEL,
                 source_language=DEFAULT_SOURCE_LANGUAGE, target_language=DEFAULT_TARGET_LANGUAGE,
                 debug=True):
        """初始化翻译服务

        Args:
            api_key: 翻译服务的API密钥
            model: 模型ID
            source_language: 源语言代码，'auto' 表示自动检测
            target_language: 目标语言代码
            debug: 是否显示调试信息

        Raises:
            ValueError: 目标语言为 'auto'
        """
        if target_language == "auto":
            raise ValueError("目标语言不能是 auto")
        self.api_key = api_key
        self.model = model
        self.source_language = source_language
        self.target_language = target_language
        self.debug = debug
        self.request_count = 0
        self.total_chars = 0

    def debug_print(self, message):
        """输出调试信息

        Args:
            message: 要输出的信息
        """
        if self.debug:
            print(message, flush=True)

    async def generate(self, prompt: str) -> str:
        """把提示词发送给模型并返回生成的文本

        Args:
            prompt: 提示词

        Returns:
            模型生成的原始文本
        """
        raise NotImplementedError("子类必须实现此方法")

    async def complete(self, prompt: str) -> str:
        """检查密钥、发送请求并校验响应非空"""
        if not self.api_key:
            raise MissingCredentialError()

        self.request_count += 1
        self.debug_print(f"[{self.service_name}] 发送请求 #{self.request_count}，模型: {self.model}")
        start_time = time.time()
        text = await self.generate(prompt)
        self.debug_print(f"[{self.service_name}] 请求耗时: {time.time() - start_time:.2f}秒")

        if not text or not text.strip():
            raise EmptyResponseError()
        return text

    def create_request(self, texts: List[str]) -> TranslationRequest:
        return TranslationRequest(list(texts), self.source_language, self.target_language, self.model)

    async def translate_batch(self, texts: List[str]) -> List[str]:
        """一次请求翻译一组文本

        Args:
            texts: 要翻译的文本列表

        Returns:
            与 texts 等长同序的译文列表
        """
        if not texts:
            return []

        request = self.create_request(texts)
        self.total_chars += sum(len(text) for text in texts)
        self.debug_print(f"\n[{self.service_name}] 开始批量翻译 {len(texts)} 个文本")
        self.debug_print(f"[{self.service_name}] 从 {self.source_language} 翻译到 {self.target_language}")

        raw = await self.complete(request.prompt())
        response = TranslationResponse.from_raw(raw, request)

        self.debug_print(f"[{self.service_name}] 批量翻译完成，共 {len(response.values)} 个文本")
        return response.values

    async def translate_text(self, text: str) -> str:
        """按上下文整体翻译一段文本

        Args:
            text: 要翻译的文本

        Returns:
            翻译后的文本
        """
        if self.debug:
            print(f"[{self.service_name}] 正在翻译单个文本: {text[:30]}..." if len(text) > 30 else f"[{self.service_name}] 正在翻译单个文本: {text}")

        self.total_chars += len(text)
        raw = await self.complete(build_passage_prompt(text, self.source_language, self.target_language))
        return raw.strip()

    async def translate_html(self, html_content: str) -> str:
        """让模型直接翻译整个HTML片段，结果未经清洗"""
        self.total_chars += len(html_content)
        raw = await self.complete(build_html_prompt(html_content, self.source_language, self.target_language))
        return raw.strip()


class GeminiTranslationService(TranslationService):
    """Gemini generateContent 接口实现"""

    service_name = "Gemini"

    def __init__(self, api_key: Optional[str] = None, model=DEFAULT_MODEL,
                 source_language=DEFAULT_SOURCE_LANGUAGE, target_language=DEFAULT_TARGET_LANGUAGE,
                 debug=True, timeout: Optional[float] = None):
        """初始化Gemini翻译服务

        Args:
            timeout: 单次HTTP请求的超时秒数，None 表示不限制
            其余参数同 TranslationService
        """
        super().__init__(api_key, model, source_language, target_language, debug)
        self.timeout = timeout

    def _post(self, prompt: str) -> requests.Response:
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}],
                }
            ]
        }
        return requests.post(
            GEMINI_ENDPOINT.format(model=self.model),
            params={"key": self.api_key},
            headers=GEMINI_HEADERS,
            json=payload,
            timeout=self.timeout,
        )

    @staticmethod
    def extract_text(data) -> str:
        """从 generateContent 的响应中取出第一段生成文本"""
        try:
            return data["candidates"][0]["content"]["parts"][0].get("text") or ""
        except (KeyError, IndexError, TypeError, AttributeError):
            return ""

    async def generate(self, prompt: str) -> str:
        try:
            response = await asyncio.to_thread(self._post, prompt)
        except requests.RequestException as e:
            raise TranslationServiceError(None, str(e)) from e

        if not response.ok:
            raise TranslationServiceError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise TranslationServiceError(response.status_code, response.text) from e

        return self.extract_text(data)


def get_translation_service(service_name="gemini", api_key=None, model=DEFAULT_MODEL,
                            source_language=DEFAULT_SOURCE_LANGUAGE, target_language=DEFAULT_TARGET_LANGUAGE,
                            debug=True, timeout=None):
    """工厂方法，根据名称创建对应的翻译服务实例

    Args:
        service_name: 翻译服务名称，支持'gemini'
        api_key: API密钥
        model: 模型ID
        source_language: 源语言代码
        target_language: 目标语言代码
        debug: 是否显示调试信息
        timeout: HTTP请求超时秒数

    Returns:
        TranslationService: 翻译服务实例

    Raises:
        ValueError: 如果指定的服务名称不支持
    """
    service_name = service_name.lower()

    if service_name == "gemini":
        return GeminiTranslationService(api_key, model, source_language, target_language, debug, timeout)
    else:
        raise ValueError(f"不支持的翻译服务: {service_name}")
