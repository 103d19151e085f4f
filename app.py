"""
HackerBlog Server
=================

Run with:
    python app.py

Visit:
    http://localhost:3000            - Front page (index.html)
    http://localhost:3000/api/posts  - Posts API
    http://localhost:3000/health     - Health check
"""

import atexit
import logging

from hackerblog import create_app
from hackerblog.core import Config

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

app = create_app()
atexit.register(app.extensions['hackerblog'].close)


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("HackerBlog")
    print("=" * 60)
    print(f"Homepage:        http://localhost:{Config.PORT}")
    print(f"Posts API:       http://localhost:{Config.PORT}/api/posts")
    print(f"Health:          http://localhost:{Config.PORT}/health")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.PORT, debug=Config.DEBUG, threaded=True)
