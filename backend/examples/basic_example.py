"""
基础示例脚本

演示如何使用 DAU 增量预测引擎
"""

import json
from pathlib import Path

from dau_impact.models.config import SimulationRequest
from dau_impact.core.simulator import forecast
from dau_impact.utils.validation import validate_request


def main():
    # 1. 从 JSON 文件加载请求
    request_path = Path(__file__).parent / "sample_request.json"
    with open(request_path, "r") as f:
        request_dict = json.load(f)

    request = SimulationRequest(**request_dict)
    print("=" * 60)
    print("DAU 增量预测示例")
    print("=" * 60)

    # 2. 校验请求
    print("\n[1] 请求校验...")
    validation = validate_request(request)
    print(f"    有效: {validation.valid}")
    if validation.warnings:
        print(f"    警告: {validation.warnings}")
    if validation.errors:
        print(f"    错误: {validation.errors}")
        return

    # 3. 运行预测
    print("\n[2] 运行预测...")
    print(f"    举措类型: {request.initiative_type.value}")
    print(f"    曝光比例: {request.exposure_rate}%")

    result = forecast(request)

    # 4. 输出结果
    print(f"\n[3] 预测结果 (request {result.request_hash})")
    print("-" * 60)
    print(f"    {'月份':>4} {'基线 DAU':>14} {'举措后 DAU':>14} {'增量':>10}")
    for month, (base, total, inc) in enumerate(
        zip(result.baseline, result.with_initiative, result.incremental), start=1
    ):
        print(f"    {month:>4} {base:>14,} {total:>14,} {inc:>10,}")

    summary = result.summary
    breakdown = summary.breakdown
    print(f"\n📊 汇总:")
    print(f"    总增量: {summary.total_impact:,} DAU-天")
    print(f"    增量峰值: {summary.peak_impact:,} (第 {summary.peak_month} 月, +{summary.peak_lift_percent}%)")
    print(f"      - 存量用户留存提升: {breakdown.existing_users:,}")
    print(f"      - 新用户留存提升: {breakdown.new_users:,}")
    print(f"      - 拉新投放: {breakdown.new_acquisition:,}")

    print(f"\n📈 留存曲线拟合参数:")
    curves = result.retention_curves
    print(f"    新用户 (幂函数): a={curves.base_new_user.a:.4f} b={curves.base_new_user.b:.4f} "
          f"R²={curves.base_new_user.r_squared:.3f}")
    print(f"    存量用户 (指数): a={curves.base_existing_user.a:.4f} λ={curves.base_existing_user.lam:.5f} "
          f"c={curves.base_existing_user.c:.4f} R²={curves.base_existing_user.r_squared:.3f}")

    print("\n" + "=" * 60)
    print("预测完成!")


if __name__ == "__main__":
    main()
