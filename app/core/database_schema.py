"""SQLite schema initialization routines."""

CURRENT_SCHEMA_VERSION = 2


def init_database_schema(conn, logger):
        """初始化数据库表结构"""

        # 开启 WAL 模式以支持更高并发
        conn.execute("PRAGMA journal_mode=WAL;")

        cursor = conn.cursor()
        cursor.execute("PRAGMA user_version")
        user_version_row = cursor.fetchone()
        current_version = int(user_version_row[0]) if user_version_row else 0
        if current_version >= CURRENT_SCHEMA_VERSION:
            conn.close()
            return

        # 用户表
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY NOT NULL,
                username TEXT NOT NULL UNIQUE,
                email TEXT UNIQUE,
                password_hash TEXT NOT NULL,
                first_name TEXT,
                last_name TEXT,
                profile_image_url TEXT,
                bio TEXT,
                role TEXT NOT NULL DEFAULT 'user',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # 关注关系
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS follows (
                follower_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                following_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (follower_id, following_id)
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_follows_following ON follows(following_id)
        """)

        # 水域表
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS lakes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                latitude REAL NOT NULL,
                longitude REAL NOT NULL,
                description TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_lakes_name ON lakes(name)
        """)

        # 渔获记录表
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS catches (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                species TEXT NOT NULL,
                size REAL,
                weight REAL,
                lake_id INTEGER REFERENCES lakes(id),
                lake_name TEXT,
                latitude REAL,
                longitude REAL,
                temperature REAL,
                depth REAL,
                lure TEXT,
                weather_data TEXT,
                comments TEXT,
                catch_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                is_verified INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # 排行榜聚合依赖的索引
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_catches_user ON catches(user_id)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_catches_lake ON catches(lake_id)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_catches_size ON catches(size DESC)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_catches_created_at ON catches(created_at DESC)
        """)

        # 点赞
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS likes (
                user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                catch_id INTEGER NOT NULL REFERENCES catches(id) ON DELETE CASCADE,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (user_id, catch_id)
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_likes_catch ON likes(catch_id)
        """)

        # 评论 (v2)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS comments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                catch_id INTEGER NOT NULL REFERENCES catches(id) ON DELETE CASCADE,
                content TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_comments_catch ON comments(catch_id, created_at)
        """)

        cursor.execute(f"PRAGMA user_version = {CURRENT_SCHEMA_VERSION}")
        conn.commit()
        conn.close()
        logger.info(f"数据库结构初始化完成: schema_version={CURRENT_SCHEMA_VERSION}")
