import os

from dotenv import load_dotenv

load_dotenv()

from coursehub import create_app  # noqa: E402

app = create_app()

if __name__ == '__main__':
    app.run(debug=os.getenv('FLASK_DEBUG', '0').strip().lower() in {'1', 'true', 'yes', 'on'}, port=int(os.getenv('PORT', '5000')))
