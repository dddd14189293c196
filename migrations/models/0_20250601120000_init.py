from tortoise import BaseDBAsyncClient


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "user" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "name" VARCHAR(255) NOT NULL,
    "email" VARCHAR(255) NOT NULL UNIQUE,
    "password" VARCHAR(255) NOT NULL,
    "role" VARCHAR(10) NOT NULL DEFAULT 'patient',
    "phone" VARCHAR(30),
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
COMMENT ON COLUMN "user"."role" IS 'PATIENT: patient\nDOCTOR: doctor\nADMIN: admin';
CREATE TABLE IF NOT EXISTS "doctor_profiles" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "specialization" VARCHAR(255) NOT NULL,
    "experience" INT NOT NULL DEFAULT 0,
    "phone" VARCHAR(30) NOT NULL,
    "bio" TEXT NOT NULL,
    "registration_id" VARCHAR(50) NOT NULL UNIQUE,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "user_id" INT NOT NULL UNIQUE REFERENCES "user" ("id") ON DELETE CASCADE
);
CREATE TABLE IF NOT EXISTS "appointments" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "appointment_date" DATE NOT NULL,
    "time" VARCHAR(5) NOT NULL,
    "symptoms" TEXT NOT NULL,
    "status" VARCHAR(20) NOT NULL DEFAULT 'pending',
    "notes" TEXT NOT NULL,
    "holds_slot" BOOL DEFAULT True,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "doctor_id" INT NOT NULL REFERENCES "user" ("id") ON DELETE CASCADE,
    "patient_id" INT NOT NULL REFERENCES "user" ("id") ON DELETE CASCADE,
    CONSTRAINT "uid_appointment_doctor__a1c0b5" UNIQUE ("doctor_id", "appointment_date", "time", "holds_slot")
);
COMMENT ON COLUMN "appointments"."time" IS 'HH:MM (24h format)';
COMMENT ON COLUMN "appointments"."status" IS 'PENDING: pending\nCONFIRMED: confirmed\nCANCELLED: cancelled\nCOMPLETED: completed';
CREATE TABLE IF NOT EXISTS "prescriptions" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "issued_on" DATE NOT NULL,
    "diagnosis" TEXT NOT NULL,
    "medicines" JSONB NOT NULL,
    "dosage" JSONB NOT NULL,
    "instructions" TEXT,
    "follow_up_date" DATE,
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "appointment_id" INT REFERENCES "appointments" ("id") ON DELETE CASCADE,
    "doctor_id" INT NOT NULL REFERENCES "user" ("id") ON DELETE CASCADE,
    "patient_id" INT NOT NULL REFERENCES "user" ("id") ON DELETE CASCADE
);
COMMENT ON COLUMN "prescriptions"."dosage" IS 'one line per medicine, same order';
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSONB NOT NULL
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        DROP TABLE IF EXISTS "prescriptions";
        DROP TABLE IF EXISTS "appointments";
        DROP TABLE IF EXISTS "doctor_profiles";
        DROP TABLE IF EXISTS "user";"""
