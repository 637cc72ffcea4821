"""订单总额核对本地执行脚本"""

import argparse
import logging
from app.db.session import SessionLocal
from app.services.order_service import OrderService

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def run_audit(batch_size: int = 500):
    """执行订单核对，返回总额不一致的订单ID"""
    db = SessionLocal()
    try:
        service = OrderService(db)
        mismatched = service.audit_order_totals(batch_size)
        logger.info(f"核对完成：{len(mismatched)} 笔订单总额不一致")
        return mismatched
    except Exception as e:
        logger.error(f"核对执行失败: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()

def main(argv=None):
    """主函数"""
    parser = argparse.ArgumentParser(description='订单总额核对工具')
    parser.add_argument(
        '--batch-size',
        type=int,
        default=500,
        help='批处理大小 (默认: 500)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='详细输出模式'
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        mismatched = run_audit(args.batch_size)
    except Exception as e:
        print(f"❌ 执行失败: {str(e)}")
        return 1

    if mismatched:
        print(f"⚠️  发现 {len(mismatched)} 笔订单总额不一致: {mismatched}")
        return 2

    print("✅ 所有订单总额与明细一致")
    return 0

if __name__ == "__main__":
    exit(main())
