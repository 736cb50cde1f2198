"""
DAU Impact Forecast API Server

启动命令：
    uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dau_impact import __version__
from dau_impact.api import router

logging.basicConfig(level=logging.INFO)

app = FastAPI(
    title="DAU Impact Forecast API",
    description="DAU 增量预测 API：基于留存曲线拟合与 cohort 累加，评估拉新/留存举措对未来 12 个月 DAU 的影响",
    version=__version__,
)

# CORS 配置，允许前端跨域访问
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check():
    """健康检查接口"""
    return {"status": "healthy", "service": "dau-impact-api"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
