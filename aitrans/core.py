#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Core translation logic for aitrans.
"""

import asyncio
import time

from .config import DEFAULT_MODEL, DEFAULT_SERVICE, DEFAULT_SOURCE_LANGUAGE, DEFAULT_TARGET_LANGUAGE, format_language
from .history import HistoryEntry, TranslationHistory
from .html_processor import HTMLProcessor
from .translation_services import get_translation_service


def run_translation(input_file: str,
                    output_file: str | None = None,
                    source_language: str = DEFAULT_SOURCE_LANGUAGE,
                    target_language: str = DEFAULT_TARGET_LANGUAGE,
                    model: str = DEFAULT_MODEL,
                    api_key: str | None = None,
                    translation_service_name: str = DEFAULT_SERVICE,
                    input_format: str = 'auto',
                    history_file: str | None = None,
                    timeout: float | None = None,
                    html_debug: bool = False,
                    trans_debug: bool = False):
    """执行核心的文件翻译流程。

    Args:
        input_file: 输入文件路径（HTML或纯文本）。
        output_file: 输出HTML文件路径 (可选)。
        source_language: 源语言代码，'auto' 表示自动检测。
        target_language: 目标语言代码。
        model: 模型ID。
        api_key: 翻译服务的API密钥。
        translation_service_name: 翻译服务名称。
        input_format: 'auto'、'html' 或 'text'。
        history_file: 翻译历史文件路径 (可选)，不指定则不记录历史。
        timeout: HTTP请求超时秒数 (可选)。
        html_debug: 是否启用HTML处理调试信息。
        trans_debug: 是否启用翻译服务调试信息。

    Returns:
        str: 输出文件的路径。

    Raises:
        Exception: 如果翻译过程中出现任何错误。
    """
    print("\n========== aitrans ==========")
    print(f"输入文件：{input_file}")
    print(f"输出文件：{output_file or '自动生成'}")
    print(f"源语言：{format_language(source_language)}")
    print(f"目标语言：{format_language(target_language)}")
    print(f"翻译服务：{translation_service_name} ({model})")
    print(f"输入格式：{input_format}")
    print(f"HTML调试：{'开启' if html_debug else '关闭'}")
    print(f"翻译调试：{'开启' if trans_debug else '关闭'}")
    print("===============================\n")

    start_time = time.time()

    try:
        print(f"[主程序] 正在初始化翻译服务：{translation_service_name}...")
        translation_service = get_translation_service(
            service_name=translation_service_name,
            api_key=api_key,
            model=model,
            source_language=source_language,
            target_language=target_language,
            debug=trans_debug,
            timeout=timeout
        )
        print(f"[主程序] 翻译服务初始化完成")
    except Exception as e:
        print(f"[错误] 初始化翻译服务失败: {str(e)}")
        raise  # 重新抛出异常以便上层处理

    html_processor = HTMLProcessor(
        translation_service=translation_service,
        debug=html_debug
    )

    try:
        print(f"[主程序] 开始翻译文件...")
        final_output_file = asyncio.run(html_processor.translate_file(input_file, output_file, input_format))
        elapsed_time = time.time() - start_time
        print(f"\n[主程序] 翻译完成！")
        print(f"[主程序] 输出文件：{final_output_file}")
        print(f"[主程序] 总耗时：{elapsed_time:.2f}秒")
    except Exception as e:
        print(f"[错误] 翻译过程中出现错误: {str(e)}")
        raise # 重新抛出异常以便上层处理

    if history_file:
        save_history(history_file, input_file, final_output_file, source_language, target_language, model)

    return final_output_file


def save_history(history_file, input_file, output_file, source_language, target_language, model):
    """把一次完成的翻译写入历史文件"""
    with open(input_file, 'r', encoding='utf-8') as f:
        input_html = f.read()
    with open(output_file, 'r', encoding='utf-8') as f:
        output_html = f.read()

    entries = TranslationHistory(history_file).add(HistoryEntry(
        source_language=source_language,
        target_language=target_language,
        model=model,
        input_html=input_html,
        output_html=output_html,
    ))
    print(f"[主程序] 已记录翻译历史，共 {len(entries)} 条")
