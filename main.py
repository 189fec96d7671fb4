#!/usr/bin/env python3
"""
圖片轉換 fan-out 工具

主程式進入點

使用方法:
    uv run main.py apply photo.png grayscale sepia tint -o output/
    uv run main.py serve-gateway
    uv run main.py serve-worker --port 8081
"""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from image_fanout.api import create_gateway_app, create_worker_app
from image_fanout.app import build_dispatcher, build_worker
from image_fanout.common.exceptions import ImageFanoutError
from image_fanout.core.progress import FanOutProgressBar
from image_fanout.data_model import TransformedImage
from image_fanout.settings import AppSettings


logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """設定日誌"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # 降低第三方日誌噪音
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    """建立命令列參數解析器"""
    parser = argparse.ArgumentParser(description="Image transform fan-out gateway")
    sub = parser.add_subparsers(dest="command", required=True)

    apply_cmd = sub.add_parser("apply", help="Apply transforms to a local image")
    apply_cmd.add_argument("image", type=Path, help="Input image")
    apply_cmd.add_argument("transforms", nargs="+", help="Transform names")
    apply_cmd.add_argument(
        "-o", "--output", type=Path, default=None, help="Output folder"
    )
    apply_cmd.add_argument(
        "--deadline", type=float, default=None, help="Overall deadline in seconds"
    )

    gateway_cmd = sub.add_parser("serve-gateway", help="Run the gateway HTTP server")
    gateway_cmd.add_argument("--host", default=None)
    gateway_cmd.add_argument("--port", type=int, default=None)

    worker_cmd = sub.add_parser("serve-worker", help="Run a worker HTTP server")
    worker_cmd.add_argument("--host", default=None)
    worker_cmd.add_argument("--port", type=int, default=None)

    return parser


def run_apply(args: argparse.Namespace, settings: AppSettings) -> int:
    """
    對本機圖片執行 fan-out 並寫出結果

    Returns:
        退出碼 (0: 全部成功, 1: 有失敗)
    """
    image_path: Path = args.image
    output_folder: Path = args.output or image_path.parent / "output"
    output_folder.mkdir(parents=True, exist_ok=True)

    deadline = args.deadline if args.deadline is not None else settings.fan_out_deadline

    failed = 0
    with build_dispatcher(settings) as dispatcher, dispatcher.fan_out(
        args.transforms, image_path.name, image_path.read_bytes(), deadline=deadline
    ) as stream:
        with FanOutProgressBar(total=len(stream.dispatched)) as bar:
            for outcome in stream:
                bar.advance(outcome)
                if isinstance(outcome, TransformedImage):
                    name = f"{image_path.stem}_{outcome.transform_name}{image_path.suffix}"
                    target = output_folder / name
                    target.write_bytes(outcome.image_bytes)
                else:
                    failed += 1
                    logger.error("%s: %s", outcome.transform_name, outcome.message)

        if stream.unregistered:
            print(f"  ⚠️  未註冊的轉換: {', '.join(stream.unregistered)}")

    print(f"\n  📊 總計: {len(stream.dispatched)} 個轉換")
    print(f"  ✅ 成功: {bar.success_count}")
    if failed > 0:
        print(f"  ❌ 失敗: {failed}")
    print(f"  📂 輸出: {output_folder}\n")
    return 1 if failed else 0


def main(argv: list[str] | None = None) -> int:
    """
    主程式

    Returns:
        退出碼 (0: 成功, 1: 失敗, 130: 中斷)
    """
    args = build_parser().parse_args(argv)
    settings = AppSettings()
    setup_logging(settings.log_level)

    try:
        if args.command == "apply":
            return run_apply(args, settings)

        if args.command == "serve-gateway":
            app = create_gateway_app(build_dispatcher(settings), settings.fan_out_deadline)
            host = args.host or settings.gateway_host
            port = args.port or settings.gateway_port
        else:
            app = create_worker_app(build_worker(settings))
            host = args.host or settings.worker_host
            port = args.port or settings.worker_port

        uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
        return 0

    except KeyboardInterrupt:
        print("\n\n👋 已中斷操作")
        return 130

    except (ImageFanoutError, OSError) as exc:
        print(f"\n❌ 錯誤: {exc}\n")
        logger.exception("處理時發生錯誤")
        return 1


if __name__ == "__main__":
    sys.exit(main())
