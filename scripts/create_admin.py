# flake8: noqa
# scripts/create_admin.py

"""
관리자 계정 생성 CLI.

    python -m scripts.create_admin --login-id admin --email admin@example.com
"""

import asyncio
import logging

import typer
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import AsyncSessionLocal, create_db_and_tables
from app.domains.usr import crud as usr_crud
from app.domains.usr import schemas as usr_schemas
from app.domains.usr.models import UserRole

logger = logging.getLogger(__name__)

cli = typer.Typer()


async def create_admin_user(db: AsyncSession, user_in: usr_schemas.UserCreate) -> bool:
    """
    관리자 사용자를 생성합니다. 같은 로그인 ID나 이메일이 있으면 만들지 않고 False를 반환합니다.
    """
    if await usr_crud.user.get_by_login_id(db, login_id=user_in.login_id):
        typer.echo(f"오류: 이미 존재하는 로그인 ID입니다: {user_in.login_id}")
        return False
    if user_in.email and await usr_crud.user.get_by_email(db, email=user_in.email):
        typer.echo(f"오류: 이미 존재하는 이메일입니다: {user_in.email}")
        return False

    await usr_crud.user.create(db, obj_in=user_in)
    typer.echo(f"관리자 계정이 성공적으로 생성되었습니다: {user_in.login_id}")
    return True


@cli.command()
def main(
    login_id: str = typer.Option(
        ..., '--login-id', '-u',
        prompt="관리자 로그인 ID를 입력하세요",
        help="로그인 시 사용할 ID입니다."
    ),
    email: str = typer.Option(
        None, '--email', '-e',
        help="관리자 이메일 주소입니다."
    ),
    password: str = typer.Option(
        ..., '--password', '-p',
        prompt="관리자 비밀번호를 입력하세요",
        hide_input=True,
        confirmation_prompt=True,
        help="최소 8자 이상"
    ),
    name: str = typer.Option("Admin", '--name', '-n', help="관리자 이름"),
    init_db: bool = typer.Option(False, '--init-db', help="테이블이 없으면 먼저 생성합니다."),
):
    """
    OAMS 애플리케이션을 위한 새로운 관리자(ADMIN)를 생성합니다.
    """
    if len(password) < 8:
        typer.echo("오류: 비밀번호는 최소 8자 이상이어야 합니다.")
        raise typer.Abort()

    user_data = usr_schemas.UserCreate(
        login_id=login_id,
        email=email,
        password=password,
        name=name,
        role=UserRole.ADMIN,
    )

    async def run_creation() -> bool:
        if init_db:
            await create_db_and_tables()
        async with AsyncSessionLocal() as db:
            return await create_admin_user(db=db, user_in=user_data)

    if not asyncio.run(run_creation()):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
