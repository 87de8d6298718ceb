from aiohttp import web

from ....version import VersionInfo


class VersionHandler:
    def __init__(self, app_name: str, info: VersionInfo):
        self.app_name = app_name
        self.info = info

    async def __call__(self, request: web.Request) -> web.Response:
        return web.json_response({
            "app": {
                "name": self.app_name,
                "version": self.info.version,
                "commit": self.info.commit,
                "buildDate": self.info.build_date,
            },
            "dependencies": self.info.dependencies,
            "runtime": {
                "python": self.info.python_version,
                "implementation": self.info.implementation,
                "platform": self.info.platform,
            },
        })
