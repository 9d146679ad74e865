"""FastAPI app exposing a Strawberry schema whose procedure mutation takes a typed table patch.

Run this file to start a local server and open http://127.0.0.1:8000/graphql

    mutation {
      updateEntity(input: {id: 1, patch: {secondColumn: 20}}) { id firstColumn secondColumn }
    }

The ``update_entity`` procedure is emulated in Python: it receives the patch
keyed by raw column names and feeds it straight into an UPDATE statement.

Environment variables:
  PATCHQL_DEMO_DATABASE_URL  optional SQLAlchemy async URL, defaults to in-memory SQLite
  PATCHQL_ON_MISSING_TABLE   ignore | warn | error (see PatchConfig.from_env)
"""
from __future__ import annotations

import logging
import os
from typing import Optional

import strawberry
from fastapi import FastAPI
from sqlalchemy import Integer, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool
from strawberry.fastapi import GraphQLRouter
from strawberry.scalars import JSON
from strawberry.types import Info

from patchql import PatchConfig, PatchPlugin, ProcedureDescriptor, build_introspection, reflect_tables

logging.basicConfig(level=logging.INFO)


class Base(DeclarativeBase):
    pass


class EntityTable(Base):
    __tablename__ = 'entity_table'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_column: Mapped[int] = mapped_column(Integer, nullable=True)
    second_column: Mapped[int] = mapped_column(Integer, nullable=True)


@strawberry.type
class Entity:
    id: int
    first_column: Optional[int]
    second_column: Optional[int]


# No defaults: a column left out of the patch must not reach the UPDATE
@strawberry.input
class EntityTablePatch:
    first_column: Optional[int] = strawberry.UNSET
    second_column: Optional[int] = strawberry.UNSET


@strawberry.input
class UpdateEntityInput:
    id: int
    patch: JSON


@strawberry.type
class Query:
    @strawberry.field
    async def entities(self, info: Info) -> list[Entity]:
        async with info.context['async_session']() as session:
            rows = (await session.execute(select(EntityTable).order_by(EntityTable.id))).scalars().all()
            return [Entity(id=r.id, first_column=r.first_column, second_column=r.second_column) for r in rows]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def update_entity(self, info: Info, input: UpdateEntityInput) -> Optional[Entity]:
        # input.patch arrives keyed by column names, e.g. {'second_column': 20}
        async with info.context['async_session']() as session:
            if input.patch:
                await session.execute(update(EntityTable).where(EntityTable.id == input.id).values(**input.patch))
                await session.commit()
            row = await session.get(EntityTable, input.id)
            if row is None:
                return None
            return Entity(id=row.id, first_column=row.first_column, second_column=row.second_column)

    @strawberry.mutation
    def validate_entity_patch(self, patch: EntityTablePatch) -> bool:
        # keeps EntityTablePatch in the schema
        return True


schema = strawberry.Schema(query=Query, mutation=Mutation)

engine = create_async_engine(
    os.getenv('PATCHQL_DEMO_DATABASE_URL', 'sqlite+aiosqlite:///:memory:'),
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

app = FastAPI(title="patchql demo")


@app.on_event("startup")
async def startup() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        tables = await conn.run_sync(reflect_tables)
        namespace = tables[0].namespace if tables else 'main'
    async with async_session() as session:
        session.add_all([EntityTable(id=1, first_column=1, second_column=2), EntityTable(id=2)])
        await session.commit()

    introspection = build_introspection(
        tables=tables,
        procedures=[ProcedureDescriptor.from_comment(namespace, 'update_entity', f'@patch patch {namespace}.entity_table')],
    )
    PatchPlugin(introspection, config=PatchConfig.from_env()).apply_to_strawberry(schema)


async def get_context():
    return {'async_session': async_session}


app.include_router(GraphQLRouter(schema, context_getter=get_context), prefix="/graphql")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
