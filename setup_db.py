# setup_db.py
import argparse
import sys
from pathlib import Path

from iptv_channels import create_app, db
from iptv_channels.seed import load_content_ids, reset_database, seed_database

def init_db(reset=False, playlist=None, content_ids_path=None, mode='all'):
    """
    Initializes the database schema and optionally seeds it from an M3U playlist.
    Run from the command line, e.g. `python setup_db.py --seed assets/channels.m3u`.
    """
    print("Creating Flask app for database initialization...")
    app = create_app()

    with app.app_context():
        print(f"Initializing database schema at: {app.config['SQLALCHEMY_DATABASE_URI']}")
        if reset:
            reset_database()
            print("Tables dropped and recreated.")
        else:
            db.create_all()
            print("Database schema ensured.")

        if playlist:
            content_ids = load_content_ids(content_ids_path) if content_ids_path else None
            m3u_content = Path(playlist).read_text(encoding='utf-8')
            summary = seed_database(m3u_content, content_ids=content_ids, mode=mode, replace=not reset)
            print(f"Seed complete: {summary}")
            if not (summary['channels'] or summary['movies'] or summary['episodes']):
                print("Warning: the playlist contained no usable entries.")
                return 1

    print("Database initialization complete.")
    return 0

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Create, reset or seed the IPTV channels database.")
    parser.add_argument('--reset', action='store_true', help="Drop all tables before creating them.")
    parser.add_argument('--seed', metavar='M3U', help="Playlist to import after creating the schema.")
    parser.add_argument('--content-ids', metavar='JSON', help="Saved Kodi PVR.GetChannels response.")
    parser.add_argument('--mode', choices=('channels', 'media', 'all'), default='all')
    args = parser.parse_args()
    sys.exit(init_db(args.reset, args.seed, args.content_ids, args.mode))
