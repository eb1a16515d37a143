# run.py
import os
from iptv_channels import create_app

# Create the Flask app instance using the app factory
app = create_app()

if __name__ == '__main__':
    # Get configuration from environment variables or use defaults
    use_debug = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    host = os.environ.get('FLASK_RUN_HOST', '0.0.0.0')
    port = int(os.environ.get('FLASK_RUN_PORT', 5000))

    app.logger.info(f" --- Starting IPTV Channels --- ")
    app.logger.info(f" Config: debug={use_debug}, host={host}, port={port}")
    app.logger.info(f" Database: {app.config.get('SQLALCHEMY_DATABASE_URI')}")

    app.run(host=host, port=port, debug=use_debug, threaded=True)
