# /run.py
import os

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

# Now, import the app factory
from app import create_app

# Create the app instance
app = create_app(os.getenv('FLASK_CONFIG'))

if __name__ == '__main__':
    app.run(
        host=os.getenv('HOST', '127.0.0.1'),
        port=int(os.getenv('PORT', '5000')),
        debug=app.config.get('DEBUG', False)
    )
