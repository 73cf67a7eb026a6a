import logging
import os
from flask import Flask
from flask_cors import CORS
from extensions import limiter
from paramtable import tables_bp

logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO'),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_CONTENT_LENGTH_MB', 50)) * 1024 * 1024
app.config['EXPRESSION_ENGINE'] = os.environ.get('PARAMTABLE_EXPRESSION_ENGINE', 'basic')

ALLOWED_ORIGINS = [
    origin.strip() for origin in
    os.environ.get('ALLOWED_ORIGINS', 'http://localhost:3000').split(',')
    if origin.strip()
]

CORS(app, resources={r"/api/*": {"origins": ALLOWED_ORIGINS}})

limiter.init_app(app)

app.register_blueprint(tables_bp)

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=False)
