#!/usr/bin/env python3
# CUI // SP-CTI
"""Target project skeleton: folders plus Express/TypeScript boilerplate.

Creating the skeleton is idempotent. Folders are created with
``exist_ok=True`` and boilerplate files that already exist are left alone,
so converted output and manual edits survive a re-run.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger("php2node.conversion.project_scaffold")

FOLDERS = (
    "controllers",
    "models",
    "routes",
    "middlewares",
    "config",
    "utils",
    "types",
    "services",
)

PACKAGE_JSON = {
    "name": "{project_name}",
    "version": "1.0.0",
    "description": "PHP to Node.js converted application",
    "main": "index.ts",
    "scripts": {
        "start": "node dist/index.js",
        "dev": "ts-node index.ts",
        "build": "tsc",
        "test": "jest",
    },
    "dependencies": {
        "express": "^4.18.2",
        "cors": "^2.8.5",
        "dotenv": "^16.3.1",
        "mongoose": "^8.0.0",
        "bcryptjs": "^2.4.3",
        "jsonwebtoken": "^9.0.2",
        "express-validator": "^7.0.1",
    },
    "devDependencies": {
        "@types/express": "^4.17.21",
        "@types/cors": "^2.8.17",
        "@types/node": "^20.10.0",
        "@types/bcryptjs": "^2.4.6",
        "@types/jsonwebtoken": "^9.0.5",
        "typescript": "^5.3.0",
        "ts-node": "^10.9.1",
        "nodemon": "^3.0.2",
    },
}

TSCONFIG = {
    "compilerOptions": {
        "target": "ES2020",
        "module": "commonjs",
        "outDir": "./dist",
        "rootDir": "./",
        "strict": True,
        "esModuleInterop": True,
        "skipLibCheck": True,
        "forceConsistentCasingInFileNames": True,
        "resolveJsonModule": True,
        "declaration": True,
        "sourceMap": True,
    },
    "include": ["**/*"],
    "exclude": ["node_modules", "dist"],
}

INDEX_TS = """import express from 'express';
import cors from 'cors';
import dotenv from 'dotenv';
import { connectDB } from './config/database';

dotenv.config();

const app = express();
const PORT = process.env.PORT || 3000;

app.use(cors());
app.use(express.json());
app.use(express.urlencoded({ extended: true }));

// Mount converted routes from ./routes here.

app.get('/health', (req, res) => {
  res.json({ status: 'OK', timestamp: new Date().toISOString() });
});

app.use((err: Error, req: express.Request, res: express.Response, next: express.NextFunction) => {
  console.error(err.stack);
  res.status(500).json({ error: 'Something went wrong!' });
});

async function startServer() {
  try {
    await connectDB();
    app.listen(PORT, () => {
      console.log(`Server running on port ${PORT}`);
    });
  } catch (error) {
    console.error('Failed to start server:', error);
    process.exit(1);
  }
}

startServer();
"""

DATABASE_TS = """import mongoose from 'mongoose';
import dotenv from 'dotenv';

dotenv.config();

const MONGODB_URI = process.env.MONGODB_URI || 'mongodb://localhost:27017/converted_app';

export const connectDB = async (): Promise<void> => {
  try {
    await mongoose.connect(MONGODB_URI);
    console.log('MongoDB connected successfully');
  } catch (error) {
    console.error('MongoDB connection error:', error);
    process.exit(1);
  }
};

export const disconnectDB = async (): Promise<void> => {
  await mongoose.disconnect();
};
"""

DATABASE_TYPES_TS = """export interface BaseDocument {
  _id: string;
  createdAt: Date;
  updatedAt: Date;
}

export interface ApiResponse<T = any> {
  success: boolean;
  data?: T;
  message?: string;
  error?: string;
}

export interface PaginationParams {
  page: number;
  limit: number;
  sort?: string;
  order?: 'asc' | 'desc';
}
"""

ENV_EXAMPLE = """# Application
PORT=3000
NODE_ENV=development

# Database
MONGODB_URI=mongodb://localhost:27017/your_database

# JWT
JWT_SECRET=your_jwt_secret_key_here
JWT_EXPIRES_IN=7d

# Logging
LOG_LEVEL=info
"""

README_MD = """# {project_name}

Automatically converted from PHP to Node.js/TypeScript.

## Setup

```bash
npm install
cp .env.example .env
npm run dev
```

## Layout

- `controllers/` - request handlers
- `models/` - data models
- `routes/` - route definitions
- `middlewares/` - authentication and validation middleware
- `config/` - database and application configuration
- `utils/` - helpers and anything not classified elsewhere
- `types/` - TypeScript type definitions
- `services/` - business service layer

Review every converted file before running it in production; sections that
could not be converted are marked with `TODO: Handle <construct>`.
"""


def _scaffold_files(project_name):
    """Relative path -> file content for every boilerplate file."""
    package_json = dict(PACKAGE_JSON, name=project_name)
    return {
        "index.ts": INDEX_TS,
        "package.json": json.dumps(package_json, indent=2) + "\n",
        "tsconfig.json": json.dumps(TSCONFIG, indent=2) + "\n",
        "README.md": README_MD.format(project_name=project_name),
        ".env.example": ENV_EXAMPLE,
        "config/database.ts": DATABASE_TS,
        "types/database.ts": DATABASE_TYPES_TS,
    }


def create_project_structure(output_dir, project_name="converted-nodejs-app"):
    """Create the target folder skeleton and boilerplate files.

    Returns dict with project_path, folders, files_written, files_skipped.

    Raises:
        OSError: A folder or file could not be created.
    """
    out_dir = Path(output_dir)
    for folder in FOLDERS:
        (out_dir / folder).mkdir(parents=True, exist_ok=True)

    files_written = []
    files_skipped = []
    for rel_path, content in _scaffold_files(project_name).items():
        target = out_dir / rel_path
        if target.exists():
            files_skipped.append(rel_path)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        files_written.append(rel_path)

    logger.info(
        "Project skeleton ready at %s (%d files written, %d kept)",
        out_dir, len(files_written), len(files_skipped),
    )
    return {
        "project_path": str(out_dir),
        "folders": list(FOLDERS),
        "files_written": files_written,
        "files_skipped": files_skipped,
    }
