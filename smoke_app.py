#!/usr/bin/env python3
"""
商城订单服务冒烟测试脚本
用于验证已启动实例的各项接口和健康状态
"""

import requests
import time
import sys
from typing import Dict, Any

BASE_URL = "http://localhost:8000"
API_PREFIX = "/api/v1"

class SmokeTester:
    """冒烟测试器类"""

    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url
        self.session = requests.Session()
        self.results = []

    def log_result(self, name: str, success: bool, message: str = ""):
        """记录测试结果"""
        status = "✅ PASS" if success else "❌ FAIL"
        result = f"{status} {name}"
        if message:
            result += f" - {message}"
        print(result)
        self.results.append({
            "test": name,
            "success": success,
            "message": message
        })

    def wait_for_service(self, max_wait: int = 30) -> bool:
        """等待服务启动"""
        print(f"⏳ 等待服务启动 (最多等待 {max_wait} 秒)...")
        start_time = time.time()

        while time.time() - start_time < max_wait:
            try:
                response = self.session.get(f"{self.base_url}/health", timeout=1)
                if response.status_code == 200:
                    print("✅ 服务已启动")
                    return True
            except requests.RequestException:
                pass

            print(".", end="", flush=True)
            time.sleep(1)

        print("\n❌ 服务启动超时")
        return False

    def check(self, name: str, method: str, path: str, expected: tuple, **kwargs) -> bool:
        """请求接口并校验状态码"""
        try:
            response = self.session.request(method, f"{self.base_url}{path}", timeout=5, **kwargs)
        except requests.RequestException as e:
            self.log_result(name, False, f"异常: {str(e)}")
            return False

        ok = response.status_code in expected
        self.log_result(name, ok, f"状态码: {response.status_code}")
        return ok

    def run_all(self) -> Dict[str, Any]:
        """运行所有检查"""
        print("🚀 商城订单服务冒烟测试开始")
        print("=" * 60)

        if not self.wait_for_service():
            return {"success": False, "results": self.results}

        buyer = {"X-User-Id": "1", "X-User-Role": "buyer"}
        checks = [
            ("健康检查", "GET", "/health", (200,), {}),
            ("根路径访问", "GET", "/", (200,), {}),
            ("OpenAPI Schema", "GET", "/openapi.json", (200,), {}),
            ("商品列表", "GET", f"{API_PREFIX}/products", (200,), {}),
            ("库存查询", "GET", f"{API_PREFIX}/products/999999/stock", (200,), {}),
            ("下单需要身份", "POST", f"{API_PREFIX}/orders", (401,), {"json": {"items": []}}),
            ("空订单被拒绝", "POST", f"{API_PREFIX}/orders", (400,),
             {"json": {"items": []}, "headers": buyer}),
            ("我的订单", "GET", f"{API_PREFIX}/orders", (200,), {"headers": buyer}),
        ]

        passed = sum(
            1 for name, method, path, expected, kwargs in checks
            if self.check(name, method, path, expected, **kwargs)
        )
        total = len(checks)

        print("\n" + "=" * 60)
        print(f"📊 测试结果汇总: {passed}/{total} 通过")

        return {
            "success": passed == total,
            "passed": passed,
            "total": total,
            "results": self.results
        }

def main():
    """主函数"""
    base_url = sys.argv[1] if len(sys.argv) > 1 else BASE_URL
    report = SmokeTester(base_url).run_all()
    sys.exit(0 if report["success"] else 1)

if __name__ == "__main__":
    main()
