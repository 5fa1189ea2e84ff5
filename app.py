"""
Buildfolio Site
===============

Run with:
    python app.py

Visit:
    http://localhost:5000/                    - Featured projects
    http://localhost:5000/projects/api/projects - Project listing
    http://localhost:5000/health              - Health check
"""

from buildfolio import create_app
from buildfolio.core.config import Config

app = create_app()


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Buildfolio")
    print("=" * 60)
    print(f"Featured:        http://localhost:{Config.port}/")
    print(f"Projects API:    http://localhost:{Config.port}/projects/api/projects")
    print(f"Admin Login:     POST http://localhost:{Config.port}/admin/login")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.port, debug=True)
