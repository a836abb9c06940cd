"""
描述: PageRender 启动脚本
主要功能:
    - 加载 .env 与 config.yaml
    - 使用 uvicorn 启动 FastAPI 应用
"""

from __future__ import annotations

import uvicorn
from dotenv import load_dotenv

from pagerender.config import get_settings
from pagerender.server.app_factory import create_app


def main() -> None:
    load_dotenv()
    settings = get_settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_config=None)


if __name__ == "__main__":
    main()
