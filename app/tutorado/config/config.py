import os
from typing import List
from dotenv import load_dotenv

load_dotenv()

class Config:
    """
    Ortam değişkenlerinden ayarları doğrudan ve basit bir şekilde tutan sınıf.
    """
    # Uzak veri deposu (Supabase REST)
    SUPABASE_URL: str = os.environ.get("SUPABASE_URL", "")
    SUPABASE_ANON_KEY: str = os.environ.get("SUPABASE_ANON_KEY", "")
    STORE_REQUEST_TIMEOUT_SECONDS: float = float(os.environ.get("STORE_REQUEST_TIMEOUT_SECONDS", 30))

    # Oturum kaydı. Redis URL'i yoksa süreç içi depo kullanılır.
    SESSION_REDIS_URL: str = os.environ.get("SESSION_REDIS_URL", "")
    SESSION_KEY: str = os.environ.get("SESSION_KEY", "tutorado_current_user")

    # Başlangıç yüklemesi için tek duvar saati zaman aşımı
    STARTUP_LOAD_TIMEOUT_SECONDS: float = float(os.environ.get("STARTUP_LOAD_TIMEOUT_SECONDS", 20))

    LOG_DIR: str = os.environ.get("LOG_DIR", "logs")

    def missing_store_settings(self) -> List[str]:
        """Eksik uzak depo ayarlarının isimlerini döndürür."""
        missing = []
        if not self.SUPABASE_URL:
            missing.append("SUPABASE_URL")
        if not self.SUPABASE_ANON_KEY:
            missing.append("SUPABASE_ANON_KEY")
        return missing

# Ayarların tek ve içe aktarılabilir bir örneğini oluştur
settings = Config()
