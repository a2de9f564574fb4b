import os

from dndspace.core.config import settings


def get_project_root() -> str:
    """프로젝트 루트 절대경로를 반환한다.
    이 파일은 dndspace/core/paths.py 에 위치하므로,
    상위 상위 디렉토리가 프로젝트 루트가 된다.
    """
    package_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.dirname(package_dir)


def get_upload_dir() -> str:
    """업로드 디렉토리 절대경로를 반환한다.
    - 설정 UPLOAD_DIRECTORY 가 있으면 이를 우선 사용한다.
    - 없으면 프로젝트 루트의 data/uploads 를 사용한다.
    디렉토리는 존재를 보장한다.
    """
    if settings.UPLOAD_DIRECTORY:
        os.makedirs(settings.UPLOAD_DIRECTORY, exist_ok=True)
        return settings.UPLOAD_DIRECTORY

    uploads = os.path.join(get_project_root(), "data", "uploads")
    os.makedirs(uploads, exist_ok=True)
    return uploads
